"""
Game constants for RichUp Global.
All monetary values are in game dollars.
"""

# Board spaces
BOARD_SIZE = 40
STARTING_CASH = 1500
GO_BONUS = 200  # Passing GO

# Jail
JAIL_POSITION = 10

# Development
MAX_HOUSE_LEVEL = 5  # Level 5 is a hotel

# Rent multipliers applied to the base rent, per house level 0-5
RENT_MULTIPLIERS_PERCENT = (100, 175, 250, 350, 500, 750)

# Stations and utilities
STATION_RENT_STEP = 25  # 25 / 50 / 75 / 100
UTILITY_MULTIPLIERS = {
    1: 4,   # One utility owned: 4x dice
    2: 10   # Both utilities owned: 10x dice
}

# Mortgage interest charged on unmortgage, in percent
UNMORTGAGE_INTEREST_PERCENT = 10

# Players
MAX_PLAYERS = 8
PLAYER_COLORS = [
    "#FF0000", "#00FF00", "#0000FF", "#FFFF00",
    "#00FFFF", "#FF00FF", "#FFA500", "#800080",
]

# Country group colours
INDIA = "#FF6B35"
BRAZIL = "#009739"
UAE = "#C8963E"
FRANCE = "#0055A4"
UK = "#8B2252"
JAPAN = "#BC002D"
CHINA = "#DE2910"
USA = "#3C3B6E"

# Tile data structure
# Format: (position, name, kind, price, country, flag, color)
# Streets get their rent/upgrade tables from the pricing formulas in the board module.
TILES = [
    # Bottom row
    (0, "GO", "start", None, None, None, None),
    (1, "Bangalore", "street", 140, "India", "🇮🇳", INDIA),
    (2, "Community Chest", "chest", None, None, None, None),
    (3, "Delhi", "street", 160, "India", "🇮🇳", INDIA),
    (4, "Income Tax", "tax", 200, None, None, None),
    (5, "Mumbai Airport", "station", 200, None, None, None),
    (6, "Rio", "street", 180, "Brazil", "🇧🇷", BRAZIL),
    (7, "Chance", "chance", None, None, None, None),
    (8, "São Paulo", "street", 200, "Brazil", "🇧🇷", BRAZIL),
    (9, "Mumbai", "street", 180, "India", "🇮🇳", INDIA),
    (10, "Jail", "jail", None, None, None, None),

    # Left column
    (11, "Abu Dhabi", "street", 250, "UAE", "🇦🇪", UAE),
    (12, "Electric Co", "utility", 150, None, None, None),
    (13, "Dubai", "street", 300, "UAE", "🇦🇪", UAE),
    (14, "Community Chest", "chest", None, None, None, None),
    (15, "CDG Airport", "station", 200, None, None, None),
    (16, "Lyon", "street", 260, "France", "🇫🇷", FRANCE),
    (17, "Chance", "chance", None, None, None, None),
    (18, "Paris", "street", 320, "France", "🇫🇷", FRANCE),
    (19, "Manchester", "street", 380, "UK", "🇬🇧", UK),
    (20, "Free Parking", "parking", None, None, None, None),

    # Top row
    (21, "London", "street", 450, "UK", "🇬🇧", UK),
    (22, "Community Chest", "chest", None, None, None, None),
    (23, "Osaka", "street", 380, "Japan", "🇯🇵", JAPAN),
    (24, "Narita Airport", "station", 200, None, None, None),
    (25, "Tokyo", "street", 450, "Japan", "🇯🇵", JAPAN),
    (26, "Chance", "chance", None, None, None, None),
    (27, "Beijing", "street", 600, "China", "🇨🇳", CHINA),
    (28, "Shanghai", "street", 650, "China", "🇨🇳", CHINA),
    (29, "Water Works", "utility", 150, None, None, None),
    (30, "Go To Jail", "police", None, None, None, None),

    # Right column
    (31, "Chicago", "street", 550, "USA", "🇺🇸", USA),
    (32, "Community Chest", "chest", None, None, None, None),
    (33, "Los Angeles", "street", 600, "USA", "🇺🇸", USA),
    (34, "Chance", "chance", None, None, None, None),
    (35, "JFK Airport", "station", 200, None, None, None),
    (36, "New York", "street", 700, "USA", "🇺🇸", USA),
    (37, "Luxury Tax", "tax", 100, None, None, None),
    (38, "Chance", "chance", None, None, None, None),
    (39, "Community Chest", "chest", None, None, None, None),
]
