"""Display constants shared by UI components."""

from banner import Color

COLOR_HEX = {
    Color.RED: "#e04040",
    Color.BLUE: "#3b6fd8",
    Color.GREEN: "#3aa35a",
    Color.COLORLESS: "#8a8a8a",
}

COLOR_LABELS = {
    Color.RED: "Red",
    Color.BLUE: "Blue",
    Color.GREEN: "Green",
    Color.COLORLESS: "Colorless",
}
