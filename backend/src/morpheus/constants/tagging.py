"""Tag suggestion and auto-tagging constants."""

# Maximum number of tags suggested alongside search results.
MAX_SUGGESTED_TAGS = 5

DEFAULT_TAG_COLOR = "#805AD5"

# Colors handed out to tags created by auto-tagging.
AUTO_TAG_COLORS = (
    "#805AD5",
    "#3182CE",
    "#38A169",
    "#DD6B20",
    "#E53E3E",
    "#6B46C1",
)

# Tags every fresh in-memory store starts with (when seeding is enabled).
DEFAULT_TAGS = (
    ("Research", "#805AD5"),
    ("Projects", "#48BB78"),
    ("Ideas", "#F56565"),
    ("Reading List", "#ECC94B"),
)
