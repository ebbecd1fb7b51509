"""
Recipe Scraper Service

Imports a recipe from a web page. Structured JSON-LD data is used when
the page has it; otherwise common recipe-site CSS selectors are tried.
"""

import json
import logging
import re
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from flask import current_app

from constants.scraping import (
    BLOCKED_WEBSITES, BLOCKING_MARKERS, BROWSER_HEADERS,
    INGREDIENT_SELECTORS, INSTRUCTION_SELECTORS, CAPTION_SELECTORS,
    TITLE_SELECTORS, SERVINGS_SELECTOR, PREP_TIME_SELECTOR, COOK_TIME_SELECTOR,
    IMAGE_SELECTORS, CATEGORY_SELECTOR,
)
from utils import (
    safe_fetch, SSRFError, sanitize_text, sanitize_url, sanitize_recipe_name,
    sanitize_instruction, sanitize_ingredient_text,
)
from .parsing import parse_ingredient

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = ('Could not find recipe data on this page. '
                     'The website might be blocking automated access.')
BLOCKED_MESSAGE = ('This website appears to be blocking automated access. '
                   'Please try copying the recipe manually.')

ISO_DURATION = re.compile(
    r'^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$',
    re.IGNORECASE)
STEP_LABEL = re.compile(r'^(?:step\s*\d+[.:]?\s*|\d+[.:)]\s*)', re.IGNORECASE)
CREDIT_LINE = re.compile(
    r'^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+(?:Food\s+Studios|Photography|Media|Group|Inc\.?|LLC|Ltd\.?)$')
CAPTION_START = re.compile(r'^(?:click|tap|view|see|image|photo|picture)\b', re.IGNORECASE)
AD_WORDS = re.compile(r'\b(?:advertisement|sponsored)\b', re.IGNORECASE)


class ScrapeError(Exception):
    """Raised when a recipe cannot be imported from a URL."""
    pass


def is_blocked_website(url):
    url = url.lower()
    return any(domain in url for domain in BLOCKED_WEBSITES)


def format_duration(value):
    """
    Render an ISO-8601 duration ('PT1H15M') as '1 hr 15 mins'.

    Values that are not ISO durations are returned unchanged.
    """
    if not value:
        return ''
    value = str(value).strip()
    match = ISO_DURATION.match(value)
    if not match or not any(match.groupdict().values()):
        return value

    parts = match.groupdict()
    hours = int(parts['hours'] or 0) + 24 * int(parts['days'] or 0)
    minutes = int(parts['minutes'] or 0)
    if parts['seconds'] and not hours and not minutes:
        minutes = 1

    out = []
    if hours:
        out.append(f"{hours} hr" + ('s' if hours > 1 else ''))
    if minutes:
        out.append(f"{minutes} min" + ('s' if minutes > 1 else ''))
    return ' '.join(out) or '0 mins'


def _has_type(item, type_name):
    if not isinstance(item, dict):
        return False
    node_type = item.get('@type')
    if isinstance(node_type, list):
        return type_name in node_type
    return node_type == type_name


def find_recipe_json_ld(soup):
    """Return the first schema.org Recipe object in the page's JSON-LD blocks."""
    for script in soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string or script.get_text() or '')
        except (json.JSONDecodeError, TypeError):
            continue

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if _has_type(candidate, 'Recipe'):
                return candidate
            if isinstance(candidate, dict) and isinstance(candidate.get('@graph'), list):
                for item in candidate['@graph']:
                    if _has_type(item, 'Recipe'):
                        return item
    return None


def _json_ld_instructions(data):
    """Flatten recipeInstructions: strings, HowToSteps and HowToSections."""
    if isinstance(data, str):
        lines = BeautifulSoup(data, 'html.parser').get_text('\n').split('\n')
        return [sanitize_instruction(STEP_LABEL.sub('', ln.strip())) for ln in lines if ln.strip()]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return []

    steps = []
    for inst in data:
        if isinstance(inst, str):
            text = inst
        elif _has_type(inst, 'HowToSection'):
            steps.extend(_json_ld_instructions(inst.get('itemListElement', [])))
            continue
        elif isinstance(inst, dict):
            text = inst.get('text') or inst.get('name') or ''
        else:
            continue
        text = sanitize_instruction(text)
        if text:
            steps.append(text)
    return steps


def _json_ld_image(data):
    if isinstance(data, list):
        data = data[0] if data else ''
    if isinstance(data, dict):
        data = data.get('url', '')
    return sanitize_url(data if isinstance(data, str) else '')


def _json_ld_yield(data):
    if isinstance(data, list):
        data = data[0] if data else ''
    if data is None:
        return ''
    return sanitize_text(str(data), max_length=50)


def _json_ld_categories(data):
    if isinstance(data, str):
        data = data.split(',')
    if not isinstance(data, list):
        return []
    return [sanitize_text(c, max_length=50) for c in data if isinstance(c, str) and c.strip()]


def _parse_ingredients(lines):
    ingredients = []
    for line in lines:
        cleaned = sanitize_ingredient_text(line)
        if not cleaned:
            continue
        parsed = parse_ingredient(cleaned)
        if parsed['item'] or parsed['amount']:
            ingredients.append(parsed)
    return ingredients


def recipe_from_json_ld(data):
    raw_ingredients = data.get('recipeIngredient') or data.get('ingredients') or []
    if isinstance(raw_ingredients, str):
        raw_ingredients = [raw_ingredients]

    name = data.get('name')
    return {
        'name': sanitize_text(name, max_length=200) if isinstance(name, str) else '',
        'servings': _json_ld_yield(data.get('recipeYield')),
        'prep_time': format_duration(data.get('prepTime')),
        'cook_time': format_duration(data.get('cookTime')),
        'ingredients': _parse_ingredients(i for i in raw_ingredients if isinstance(i, str)),
        'instructions': _json_ld_instructions(data.get('recipeInstructions', [])),
        'image_url': _json_ld_image(data.get('image')),
        'categories': _json_ld_categories(data.get('recipeCategory')),
    }


def _first_text(soup, selectors):
    for selector in selectors:
        el = soup.select_one(selector)
        if el:
            text = el.get_text(' ', strip=True)
            if text:
                return text
    return ''


def _clean_instruction_element(el):
    """Drop captions, images and credit lines from an instruction element."""
    for junk in el.select(CAPTION_SELECTORS):
        junk.decompose()

    lines = [ln.strip() for ln in el.get_text('\n').split('\n')]
    kept = []
    for line in lines:
        if len(line) <= 5:
            continue
        if line.isupper() or CREDIT_LINE.match(line) or CAPTION_START.match(line):
            continue
        kept.append(line)

    text = AD_WORDS.sub('', ' '.join(kept))
    text = STEP_LABEL.sub('', text.strip())
    return sanitize_instruction(text)


def recipe_from_html(soup):
    ingredients = _parse_ingredients(
        el.get_text(' ', strip=True) for el in soup.select(INGREDIENT_SELECTORS))

    instructions = []
    for el in soup.select(INSTRUCTION_SELECTORS):
        text = _clean_instruction_element(el)
        if text:
            instructions.append(text)

    servings = _first_text(soup, [SERVINGS_SELECTOR])
    servings = re.sub(r'^(?:serves|servings|yield)\s*:?\s*', '', servings, flags=re.IGNORECASE)

    image_url = ''
    for selector in IMAGE_SELECTORS:
        el = soup.select_one(selector)
        if el and (el.get('src') or el.get('content')):
            image_url = el.get('src') or el.get('content')
            break
    if not image_url:
        og = soup.find('meta', property='og:image')
        image_url = og.get('content', '') if og else ''

    categories = []
    for el in soup.select(CATEGORY_SELECTOR):
        text = sanitize_text(el.get_text(' ', strip=True), max_length=50)
        if text and text not in categories:
            categories.append(text)

    return {
        'name': sanitize_text(_first_text(soup, TITLE_SELECTORS), max_length=200),
        'servings': sanitize_text(servings, max_length=50),
        'prep_time': sanitize_text(_first_text(soup, [PREP_TIME_SELECTOR]), max_length=50),
        'cook_time': sanitize_text(_first_text(soup, [COOK_TIME_SELECTOR]), max_length=50),
        'ingredients': ingredients,
        'instructions': instructions,
        'image_url': sanitize_url(image_url),
        'categories': categories,
    }


def parse_recipe_page(html, url=''):
    """Extract a recipe from page HTML (no network access)."""
    if any(marker in html for marker in BLOCKING_MARKERS):
        raise ScrapeError(BLOCKED_MESSAGE)

    soup = BeautifulSoup(html, 'html.parser')
    json_ld = find_recipe_json_ld(soup)
    if json_ld:
        logger.debug("Using JSON-LD recipe data for %s", url)
        recipe = recipe_from_json_ld(json_ld)
    else:
        logger.debug("No JSON-LD recipe on %s, falling back to selectors", url)
        recipe = recipe_from_html(soup)

    if not recipe['name'] or (not recipe['ingredients'] and not recipe['instructions']):
        raise ScrapeError(NOT_FOUND_MESSAGE)

    recipe['name'] = sanitize_recipe_name(recipe['name'])
    recipe['source_url'] = sanitize_url(url)
    recipe['source_name'] = (urlparse(url).hostname or '').removeprefix('www.')
    return recipe


def scrape_recipe(url, timeout=None):
    """
    Fetch a page and import its recipe.

    Returns a dict with name, servings, prep_time, cook_time, ingredients,
    instructions, image_url, categories, source_url and source_name.

    Raises:
        ScrapeError: blocked site, fetch failure or no recipe on the page
    """
    url = (url or '').strip()
    if not url:
        raise ScrapeError('Please enter a URL')
    if not sanitize_url(url):
        raise ScrapeError('Invalid URL. Only http and https URLs are allowed.')

    if is_blocked_website(url):
        hostname = urlparse(url).hostname or url
        raise ScrapeError(
            f"This website ({hostname}) is known to block automated recipe scraping. "
            "Please copy the recipe manually or try a different recipe website."
        )

    if timeout is None:
        timeout = current_app.config.get('SCRAPE_TIMEOUT', 10)

    try:
        response = safe_fetch(url, headers=BROWSER_HEADERS, timeout=timeout)
    except SSRFError as e:
        raise ScrapeError(f"URL blocked for security: {e}")
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else ''
        logger.warning("Fetching %s failed with status %s", url, status)
        raise ScrapeError(f"Failed to fetch recipe: {status}".strip())
    except requests.RequestException as e:
        logger.warning("Fetching %s failed: %s", url, e)
        raise ScrapeError(f"Could not fetch URL: {e}")

    recipe = parse_recipe_page(response.text, url)
    logger.info("Scraped recipe %r from %s (%d ingredients, %d steps)",
                recipe['name'], url, len(recipe['ingredients']), len(recipe['instructions']))
    return recipe
