CORE_NAMES = [
    "Alex Johnson", "Sarah Chen", "Michael Brown", "Emma Davis", "James Wilson",
    "Lisa Garcia", "David Miller", "Anna Rodriguez", "Chris Taylor", "Maria Lopez",
    "Robert Anderson", "Jennifer White", "Kevin Lee", "Amanda Clark", "Daniel Hall",
    "Jessica Martinez", "Ryan Thompson", "Ashley Lewis", "Brandon Walker", "Nicole Young",
]

# Hiring-panel candidates draw from a wider pool
EXTENDED_NAMES = CORE_NAMES + [
    "Thomas Moore", "Rachel Kim", "Steven Wright", "Michelle Turner", "Jason Scott",
    "Laura Adams", "Mark Phillips", "Stephanie Hill", "Andrew Green", "Samantha Baker",
]


def generate_name(rng):
    return rng.choice(CORE_NAMES)


def generate_candidate_name(rng):
    return rng.choice(EXTENDED_NAMES)
