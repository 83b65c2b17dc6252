"""
Game constants for Whispers.

This module contains all constant values used throughout the game,
including room objects, personal items, fallback texts and configuration values.
"""

# Game code alphabet and length
GAME_CODE_LENGTH = 6
GAME_CODE_ATTEMPTS = 10

# Player names
MIN_NAME_LENGTH = 1
MAX_NAME_LENGTH = 30

# Whispers
MAX_WHISPER_LENGTH = 140

# Room of Secrets
PERSONAL_ITEMS_PER_PLAYER = 4

# Fallback narrative texts used when the AI service is unavailable
FALLBACK_NARRATION = 'The shadows whisper of secrets yet to be revealed...'
FALLBACK_MISSION = 'Observe the other players carefully and take notes.'
FALLBACK_CHAOS_EVENT = 'The winds of change stir through the game...'
FALLBACK_ROOM_LOG = 'The {object_name} bears witness to another secret.'

# Predefined room objects for the Room of Secrets
ROOM_OBJECTS = [
    ("Broken Mirror", "A shattered looking glass that reflects fractured truths"),
    ("Ancient Candle", "A melted candle that has witnessed countless secrets"),
    ("Dusty Portrait", "A painting of unknown nobility, eyes that seem to follow"),
    ("Ornate Fountain", "A dry fountain where wishes once echoed"),
    ("Grandfather Clock", "Time stands still at midnight, forever frozen"),
    ("Velvet Armchair", "A throne where conspiracies were once whispered"),
    ("Crystal Chandelier", "Hanging crystals that catch and scatter light mysteriously"),
    ("Mahogany Desk", "A writing surface scarred by urgent, secret correspondence"),
    ("Stone Fireplace", "Cold ashes hide the remnants of burned evidence"),
    ("Silk Curtains", "Heavy drapes that conceal what lies beyond"),
    ("Persian Rug", "Intricate patterns that tell stories of distant lands"),
    ("Wooden Chest", "A locked container holding forgotten treasures"),
    ("Silver Goblet", "A chalice that has tasted both wine and poison"),
    ("Leather Journal", "Blank pages waiting for confessions to be written"),
    ("Iron Key", "A key that unlocks doors better left closed"),
    ("Marble Statue", "A silent witness carved in eternal stone"),
    ("Stained Glass Window", "Colored light filters through scenes of betrayal"),
    ("Antique Vase", "Delicate porcelain that holds more than flowers"),
    ("Golden Frame", "An empty frame waiting for the perfect deception"),
    ("Brass Compass", "Points not north, but toward hidden truths"),
    ("Ivory Chess Set", "A game where pawns become kings and kings fall"),
    ("Crystal Ball", "Clouded glass that reveals futures best left unknown"),
    ("Feathered Quill", "A writing instrument that has signed many fates"),
    ("Copper Scales", "Justice weighs heavy in the balance"),
    ("Obsidian Dagger", "A blade as dark as the secrets it has carved"),
    ("Silver Locket", "Contains a portrait of someone long forgotten"),
    ("Wooden Mask", "A face to hide behind when truth becomes unbearable"),
    ("Golden Hourglass", "Sand falls like tears, marking time's passage"),
    ("Brass Lantern", "Casts shadows that dance with hidden meanings"),
    ("Stone Gargoyle", "A guardian that watches over dark secrets"),
]

# Personal items that players can be assigned
PERSONAL_ITEMS = [
    "Silver Coin", "Pocket Watch", "Cracked Letter", "Silk Ribbon",
    "Brass Button", "Ivory Comb", "Leather Pouch", "Glass Marble",
    "Wooden Token", "Metal Thimble", "Paper Rose", "Wax Seal",
    "Bone Dice", "Cloth Patch", "Stone Pebble", "Shell Fragment",
    "Feather Plume", "Thread Spool", "Ink Vial", "Candle Stub",
    "Key Fragment", "Mirror Shard", "Pressed Flower", "Copper Wire",
    "Velvet Cord", "Pearl Button", "Tin Whistle", "Clay Bead",
    "Lace Trim", "Gold Flake", "Iron Nail", "Chalk Piece"
]

# Room object states after each interaction
ROOM_ACTION_STATES = {
    'DESTROY': 'DESTROYED',
    'CLEAN': 'CLEANED',
    'VISIT': 'VISITED',
    'PLACE': 'PLACED'
}
