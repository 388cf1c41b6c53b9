"""Major families used for partial credit when a major is not listed.

A student whose major falls in the same family as one of a scholarship's
eligible majors gets related-field credit. Extend as the catalog grows.
"""

MAJOR_FAMILIES = [
    {
        "family": "STEM",
        "keywords": [
            "biology", "chemistry", "physics", "mathematics",
            "engineering", "computer science", "science",
        ],
    },
    {
        "family": "Engineering",
        "keywords": [
            "mechanical", "electrical", "civil", "chemical",
            "computer", "aerospace", "biomedical",
        ],
    },
    {
        "family": "Business",
        "keywords": ["business", "finance", "accounting", "economics", "marketing", "management"],
    },
    {
        "family": "Health",
        "keywords": ["nursing", "medicine", "pharmacy", "public health", "healthcare", "medical"],
    },
    {
        "family": "Arts",
        "keywords": ["art", "music", "theater", "dance", "design", "fine arts", "performing arts"],
    },
    {
        "family": "Humanities",
        "keywords": ["english", "history", "philosophy", "literature", "languages", "liberal arts"],
    },
]

# Citizenship statuses that also satisfy a requirement (key is the requirement)
CITIZENSHIP_EQUIVALENTS = {
    "permanent resident": ["us citizen"],
}

# Military affiliations that earn partial credit against a requirement
MILITARY_RELATED = {
    "veteran": ["active duty"],
    "dependent": ["veteran", "active duty"],
}
