"""
Scraping Constants

Blocked sites, request headers and CSS selectors used by the
URL recipe importer.
"""

# Sites known to block automated recipe scraping
BLOCKED_WEBSITES = [
    'canadianliving.com',
    'cooking.nytimes.com',
    'foodandwine.com',
    'epicurious.com',
    'bonappetit.com',
    'tasty.co',
    'delish.com',
    'food.com',
]

# Phrases that indicate a bot-check page rather than a recipe
BLOCKING_MARKERS = [
    'Access Denied',
    'Please enable JavaScript',
    'bot detection',
    'security check',
    'redirect count exceeded',
]

BROWSER_HEADERS = {
    'User-Agent': ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                   '(KHTML, like Gecko) Chrome/120.0 Safari/537.36'),
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
}

INGREDIENT_SELECTORS = ', '.join([
    'li[class*="ingredient"]',
    '.ingredient-item',
    '.ingredients li',
    '[class*="ingredients__item"]',
    '.mntl-structured-ingredients__list-item',
    '[class*="recipe-ingredients"] li',
    '[class*="recipe__ingredients"] li',
])

INSTRUCTION_SELECTORS = ', '.join([
    'li[class*="instruction"]',
    '.instruction-item',
    '.instructions li',
    '.preparation-steps li',
    '.recipe-directions__list li',
    '.steps li',
    '.mntl-sc-block-group--LI p',
    '[class*="recipe__steps"] li',
    '[class*="recipe-steps"] li',
    '[class*="recipe-instructions"] li',
    '.recipe-method-step',
    '[id*="recipe-steps"] li',
    '[class*="recipe-directions"] li',
    '[class*="recipe__directions"] li',
    '[class*="recipe__instructions"] li',
])

# Elements stripped from instruction blocks before reading their text
CAPTION_SELECTORS = ', '.join([
    'figcaption', '.image-caption', '.caption', '[class*="caption"]',
    '[class*="image-description"]', 'img', 'figure', '[class*="image-container"]',
])

TITLE_SELECTORS = [
    'h1',
    '[class*="recipe-title"]',
    '[class*="recipe-name"]',
    '[id*="recipe-title"]',
    '[class*="recipe__title"]',
    '[class*="recipe__name"]',
]

SERVINGS_SELECTOR = ', '.join([
    '[itemprop="recipeYield"]', '[class*="servings"]', '[class*="yield"]',
    '[class*="serves"]', '[class*="recipe__servings"]',
])

PREP_TIME_SELECTOR = ', '.join([
    '[itemprop="prepTime"]', '[class*="prep-time"]', '[class*="preptime"]',
    '[class*="prep_time"]', 'time[class*="prep"]',
])

COOK_TIME_SELECTOR = ', '.join([
    '[itemprop="cookTime"]', '[class*="cook-time"]', '[class*="cooktime"]',
    '[class*="cook_time"]', 'time[class*="cook"]',
])

IMAGE_SELECTORS = [
    '[itemprop="image"]',
    '[class*="recipe-image"] img',
    '[class*="recipe__image"] img',
    '[class*="recipe-photo"] img',
    '[class*="recipe-header"] img',
]

CATEGORY_SELECTOR = ', '.join([
    '[itemprop="recipeCategory"]', '[class*="recipe-category"]', '[class*="recipe__category"]',
])
