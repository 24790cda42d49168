ROWS = 7
COLS = 53

# GitHub's light theme, from "no contributions" to the darkest green.
PALETTE: tuple[str, ...] = ("#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39")
PALETTE_SIZE = len(PALETTE)
DEFAULT_LEVEL = 1

# (label, start week, span in weeks) for a 53-week year.
MONTHS: tuple[tuple[str, int, int], ...] = (
    ("Jan", 0, 4),
    ("Feb", 4, 5),
    ("Mar", 9, 4),
    ("Apr", 13, 5),
    ("May", 18, 4),
    ("Jun", 22, 5),
    ("Jul", 27, 4),
    ("Aug", 31, 5),
    ("Sep", 36, 4),
    ("Oct", 40, 5),
    ("Nov", 45, 4),
    ("Dec", 49, 4),
)

# Day 0 is Sunday; only Mon, Wed and Fri are labelled.
DAY_LABELS: tuple[str, ...] = ("", "Mon", "", "Wed", "", "Fri", "")

EXPORT_WIDTH = 1500
EXPORT_HEIGHT = 500
EXPORT_PADDING = 80
CAPTURE_OVERSAMPLE = 3
EXPORT_FILENAME = "github-contribution-graph.png"
