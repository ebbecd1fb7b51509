"""
Unit Constants

Unit vocabulary and fraction tables used when splitting ingredient
lines into amount / unit / item.
"""

# Recognized unit tokens (lowercase, without trailing period)
RECIPE_UNITS = {
    # Volume
    'cup', 'cups', 'c',
    'tablespoon', 'tablespoons', 'tbsp', 'tbs', 'tbl', 'tb', 't',
    'teaspoon', 'teaspoons', 'tsp', 'ts',
    'milliliter', 'milliliters', 'millilitre', 'millilitres', 'ml',
    'liter', 'liters', 'litre', 'litres', 'l',
    'pint', 'pints', 'pt',
    'quart', 'quarts', 'qt',
    'gallon', 'gallons', 'gal',
    # Weight
    'ounce', 'ounces', 'oz',
    'pound', 'pounds', 'lb', 'lbs',
    'gram', 'grams', 'g',
    'kilogram', 'kilograms', 'kg',
    # Count / informal
    'pinch', 'pinches',
    'dash', 'dashes',
    'handful', 'handfuls',
    'clove', 'cloves',
    'slice', 'slices',
    'piece', 'pieces',
    'can', 'cans',
    'package', 'packages', 'pkg',
    'stick', 'sticks',
    'bunch', 'bunches',
    'sprig', 'sprigs',
    'head', 'heads',
    'stalk', 'stalks',
}

# Common fractions for display (using precise values)
COMMON_FRACTIONS = {
    0.125: '1/8', 0.25: '1/4', 1/3: '1/3', 0.375: '3/8',
    0.5: '1/2', 0.625: '5/8', 2/3: '2/3', 0.75: '3/4', 0.875: '7/8'
}

# Unicode fraction characters mapping
UNICODE_FRACTIONS = {
    '\u00bd': 0.5,    # ½
    '\u2153': 1/3,    # ⅓
    '\u2154': 2/3,    # ⅔
    '\u00bc': 0.25,   # ¼
    '\u00be': 0.75,   # ¾
    '\u2155': 0.2,    # ⅕
    '\u2156': 0.4,    # ⅖
    '\u2157': 0.6,    # ⅗
    '\u2158': 0.8,    # ⅘
    '\u2159': 1/6,    # ⅙
    '\u215a': 5/6,    # ⅚
    '\u215b': 0.125,  # ⅛
    '\u215c': 0.375,  # ⅜
    '\u215d': 0.625,  # ⅝
    '\u215e': 0.875,  # ⅞
}
