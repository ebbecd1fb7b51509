"""
Parsing Service

Heuristics for turning scraped, pasted or OCR'd recipe text into
structured ingredients and instructions. Best effort: the output is
shown to the user for review before it is saved.
"""

import re

from constants import RECIPE_UNITS, UNICODE_FRACTIONS, COMMON_FRACTIONS

# A single quantity: mixed fraction, simple fraction, decimal or integer
_QTY = r'(?:\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?|\.\d+)'
# Optional range ("2-3", "2 to 3")
AMOUNT_PATTERN = re.compile(rf'^({_QTY}(?:\s*(?:-|–|—|to)\s*{_QTY})?)(?![\d/])\s*', re.IGNORECASE)
RANGE_SPLIT = re.compile(r'\s*(?:-|–|—|\bto\b)\s*', re.IGNORECASE)

STEP_PREFIX = re.compile(r'^\s*(?:step\s*\d+\s*[:.)\-]?\s*|\d+\s*[.)]\s+|\d+\s*[.)]$)', re.IGNORECASE)
BULLET_PREFIX = re.compile(r'^\s*[-•*·▪●]+\s*')
FLUID_OUNCE = re.compile(r'^(fl\.?\s*oz\.?)(?:\s+|$)', re.IGNORECASE)

INGREDIENT_HEADER = re.compile(r'^(?:ingredients?|you will need|what you(?:\'ll)? need)\s*:?$', re.IGNORECASE)
INSTRUCTION_HEADER = re.compile(
    r'^(?:instructions?|directions?|method|steps?|preparation|how to make(?: it)?)\s*:?$', re.IGNORECASE)
SERVINGS_LINE = re.compile(r'^(?:serves|servings|yield|makes)\s*:?\s*(.+)$', re.IGNORECASE)
PREP_LINE = re.compile(r'^prep(?:aration)?\s*time\s*:?\s*(.+)$', re.IGNORECASE)
COOK_LINE = re.compile(r'^cook(?:ing)?\s*time\s*:?\s*(.+)$', re.IGNORECASE)

ITEM_PREFIXES = ('of ', '- ', '* ', '• ')
COMPOUND_DASH = re.compile(r'^[-–](?=[^\W\d_])')
LEADING_DASH = re.compile(r'^[-–—]+\s*')


def float_to_fraction(value):
    """Convert float to fraction string for display."""
    if value is None or value == 0:
        return '0'
    # Check if it's a whole number
    if value == int(value):
        return str(int(value))
    # Split into whole and decimal parts
    whole = int(value)
    decimal = value - whole
    # Check common fractions (with tolerance)
    for dec, frac in COMMON_FRACTIONS.items():
        if abs(decimal - dec) < 0.02:
            if whole > 0:
                return f"{whole} {frac}"
            return frac
    return format_amount(value)


def format_amount(value):
    """Shortest decimal string for a quantity: 0.5, 1.5, 2, 0.333."""
    if value == int(value):
        return str(int(value))
    return f"{value:.3f}".rstrip('0').rstrip('.')


def normalize_fractions(text):
    """Replace Unicode fraction characters with decimal equivalents."""
    # First, normalize all whitespace (including non-breaking spaces) to regular spaces
    text = re.sub(r'[\s\u00a0\u2000-\u200b]+', ' ', text)
    # Fraction slash (U+2044) behaves like a plain slash
    text = text.replace('\u2044', '/')

    for char, value in UNICODE_FRACTIONS.items():
        if char not in text:
            continue
        # Mixed fraction like "1½" or "1 ½"
        pattern = r'(\d+)\s*' + re.escape(char)
        text = re.sub(pattern, lambda m: format_amount(int(m.group(1)) + value), text)
        text = text.replace(char, format_amount(value))
    return text


def parse_fraction(value, default=1.0, min_val=None):
    """
    Parse a fraction string like '1 1/2' or '1/4' into a float.
    Also handles plain numbers like '2' or '0.5' and Unicode fractions.
    """
    if not value:
        return default

    value = normalize_fractions(str(value)).strip()
    total = 0.0

    try:
        # Try plain float first
        total = float(value)
    except ValueError:
        # Parse as fraction(s)
        for part in re.sub(r'\s*/\s*', '/', value).split():
            if '/' in part:
                try:
                    num, den = part.split('/')
                    total += float(num) / float(den)
                except (ValueError, ZeroDivisionError):
                    pass
            else:
                try:
                    total += float(part)
                except ValueError:
                    pass

    if total <= 0:
        total = default
    if min_val is not None and total < min_val:
        total = min_val

    return total


def _normalize_amount(raw):
    """'1 1/2' -> '1.5', '1/2-1' -> '0.5-1'. Ranges keep a plain dash."""
    parts = [p for p in RANGE_SPLIT.split(raw.strip()) if p]
    return '-'.join(format_amount(parse_fraction(p, default=0.0)) for p in parts)


def _is_unit(token):
    return token.lower().rstrip('.') in RECIPE_UNITS


def parse_ingredient(text):
    """
    Split an ingredient line into {'amount', 'unit', 'item'}.

    '1/2 cup flour'        -> {'amount': '0.5', 'unit': 'cup', 'item': 'flour'}
    '2 Tbsp. olive oil'    -> {'amount': '2', 'unit': 'Tbsp.', 'item': 'olive oil'}
    'pinch of salt'        -> {'amount': '', 'unit': 'pinch', 'item': 'salt'}
    'salt to taste'        -> {'amount': '', 'unit': '', 'item': 'salt to taste'}

    The unit keeps its source spelling; the amount is normalized to a
    decimal string.
    """
    line = normalize_fractions(text or '').strip()
    line = BULLET_PREFIX.sub('', line)
    if not line:
        return {'amount': '', 'unit': '', 'item': ''}

    amount = ''
    remaining = line
    amount_match = AMOUNT_PATTERN.match(line)
    if amount_match:
        amount = _normalize_amount(amount_match.group(1))
        remaining = line[amount_match.end():].strip()
        # Hyphenated size such as "12-ounce can"
        remaining = COMPOUND_DASH.sub('', remaining)

    unit = ''
    fl_match = FLUID_OUNCE.match(remaining)
    if fl_match:
        unit = fl_match.group(1)
        remaining = remaining[fl_match.end():].strip()
    else:
        words = remaining.split(' ', 1)
        if words[0] and _is_unit(words[0]):
            # A bare one-letter token is only a unit when a quantity precedes it
            if amount or len(words[0].rstrip('.')) > 1:
                unit = words[0]
                remaining = words[1].strip() if len(words) > 1 else ''

    item = remaining
    for prefix in ITEM_PREFIXES:
        if item.lower().startswith(prefix):
            item = item[len(prefix):].strip()
    item = LEADING_DASH.sub('', item)

    return {'amount': amount, 'unit': unit, 'item': item}


def parse_instruction(text):
    """Strip step numbering ('1.', '2)', 'Step 3:') and bullets from a line."""
    line = (text or '').strip()
    cleaned = STEP_PREFIX.sub('', line, count=1)
    cleaned = BULLET_PREFIX.sub('', cleaned).strip()
    return cleaned or line


def parse_bulk_ingredients(text):
    """One ingredient per non-empty line."""
    ingredients = []
    for line in (text or '').splitlines():
        line = line.strip()
        if not line:
            continue
        parsed = parse_ingredient(line)
        if not parsed['item'] and not parsed['amount']:
            continue
        ingredients.append(parsed)
    return ingredients


def parse_bulk_instructions(text):
    """One instruction per non-empty line."""
    return [parse_instruction(line) for line in (text or '').splitlines() if line.strip()]


def looks_like_step(line):
    return bool(STEP_PREFIX.match(line))


def looks_like_ingredient(line):
    """Leading quantity (not a step number), or a unit word followed by 'of'."""
    line = normalize_fractions(line).strip()
    if looks_like_step(line):
        return False
    if AMOUNT_PATTERN.match(line):
        return True
    words = line.lower().split()
    return len(words) >= 3 and _is_unit(words[0]) and words[1] == 'of'


def _is_section_header(line):
    return bool(INGREDIENT_HEADER.match(line) or INSTRUCTION_HEADER.match(line))


def _is_plausible_title(line):
    if _is_section_header(line) or looks_like_ingredient(line) or looks_like_step(line):
        return False
    if SERVINGS_LINE.match(line) or PREP_LINE.match(line) or COOK_LINE.match(line):
        return False
    # A full sentence is a step, not a title
    if line.endswith(('.', '!', '?')):
        return False
    letters = sum(1 for ch in line if ch.isalpha())
    return letters >= 3 and len(line) <= 80 and len(line.split()) <= 12


def _is_group_header(line):
    # "For the sauce:" style sub-heading
    return line.endswith(':') and len(line.split()) <= 5 and not looks_like_ingredient(line)


def parse_recipe_text(text):
    """
    Segment free recipe text (OCR output, a pasted page) into a recipe.

    Returns a dict with name, servings, prep_time, cook_time,
    ingredients (list of amount/unit/item dicts) and instructions
    (list of strings).
    """
    lines = [re.sub(r'\s+', ' ', ln).strip() for ln in (text or '').splitlines()]
    lines = [ln for ln in lines if ln]

    recipe = {
        'name': '',
        'servings': '',
        'prep_time': '',
        'cook_time': '',
        'ingredients': [],
        'instructions': [],
    }

    for idx, line in enumerate(lines):
        if _is_plausible_title(line):
            recipe['name'] = line
            del lines[idx]
            break

    section = None
    group = ''
    for line in lines:
        if INGREDIENT_HEADER.match(line):
            section, group = 'ingredients', ''
            continue
        if INSTRUCTION_HEADER.match(line):
            section, group = 'instructions', ''
            continue

        meta = SERVINGS_LINE.match(line)
        if meta and not recipe['servings']:
            recipe['servings'] = meta.group(1).strip()
            continue
        meta = PREP_LINE.match(line)
        if meta and not recipe['prep_time']:
            recipe['prep_time'] = meta.group(1).strip()
            continue
        meta = COOK_LINE.match(line)
        if meta and not recipe['cook_time']:
            recipe['cook_time'] = meta.group(1).strip()
            continue

        if section and _is_group_header(line):
            group = line.rstrip(':').strip()
            continue

        kind = section
        if kind is None:
            if looks_like_step(line):
                kind = 'instructions'
            elif looks_like_ingredient(line) or BULLET_PREFIX.match(line):
                kind = 'ingredients'
            elif len(line.split()) >= 8 or line.endswith('.'):
                kind = 'instructions'
            else:
                kind = 'ingredients'
        elif kind == 'ingredients' and looks_like_step(line):
            # Numbered steps without a header end the ingredient list
            section = kind = 'instructions'

        if kind == 'ingredients':
            parsed = parse_ingredient(line)
            if parsed['item'] or parsed['amount']:
                parsed['group_name'] = group
                recipe['ingredients'].append(parsed)
        else:
            _append_instruction(recipe['instructions'], line)

    return recipe


def _append_instruction(steps, line):
    """OCR wraps long steps; join a line onto an unfinished previous step."""
    if steps and not looks_like_step(line) and not re.search(r'[.!?:]$', steps[-1]):
        steps[-1] = f"{steps[-1]} {parse_instruction(line)}"
        return
    steps.append(parse_instruction(line))
