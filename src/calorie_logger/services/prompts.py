"""Prompt templates for each estimation stage.

Templates use ``$name`` placeholders so the JSON examples can keep their
braces unescaped.
"""

from string import Template

DISHES_PROMPT = Template(
    """Identify the separate dishes, drinks and snacks in this meal description.

RULES:
1. List each dish once, in the order it is mentioned
2. Keep quantities that belong to a dish in its name ("2 eggs", "large fries")
3. Do not split a dish into ingredients yet
4. Ignore words that are not food

EXAMPLES:
Input: "2 eggs and toast"
Output: ["2 eggs", "toast"]

Input: "Big Mac with a medium coke"
Output: ["Big Mac", "medium coca-cola"]

Return ONLY a JSON array of dish names:
["dish 1", "dish 2"]

MEAL: "$description\""""
)

INGREDIENTS_PROMPT = Template(
    """Break this dish into its raw-food ingredients.

RULES:
1. One entry per ingredient, using plain food names a nutrition database knows
2. Repeat an ingredient once per counted unit ("2 eggs" gives "egg", "egg")
3. Include cooking fats, sauces and condiments that are usually present
4. Respect modifications from the meal (no mayo, extra cheese)

EXAMPLES:
Dish: "Big Mac"
Output: ["beef patty", "beef patty", "sesame seed bun", "cheddar cheese",
"lettuce", "pickles", "onion", "special sauce"]

Dish: "grilled chicken salad with ranch"
Output: ["grilled chicken breast", "mixed lettuce", "ranch dressing"]

Return ONLY a JSON array of ingredient names:
["ingredient 1", "ingredient 2"]

DISH: "$dish"
FULL MEAL: "$description\""""
)

PORTION_PROMPT = Template(
    """Estimate a realistic amount of one ingredient in a dish.

GUIDELINES (grams):
- Meat, fish or tofu main: 85-170 per serving; one egg: 50
- Bread slice: 25-40; bun: 50-70; cooked rice or pasta: 150-250
- Cheese slice: 20; vegetables in a salad or sandwich: 10-80
- Butter, oil, mayonnaise: 5-15; sauces and dressings: 15-30
- Herbs, spices, salt: 1-5
- Drinks: small 350, medium 500, large 700

EXAMPLES:
Ingredient: "beef patty" in "Big Mac"
Output: {"grams": 45, "portion": "1 regular patty"}

Ingredient: "butter" in "toast"
Output: {"grams": 5, "portion": "1 teaspoon"}

Return ONLY a JSON object:
{"grams": number, "portion": "human readable amount"}

INGREDIENT: "$ingredient"
DISH: "$dish"
FULL MEAL: "$description\""""
)

SIMPLE_PORTION_PROMPT = Template(
    """How many grams of "$ingredient" are in one typical serving of "$dish"?

Return ONLY a JSON object:
{"grams": number, "portion": "human readable amount"}"""
)

CALORIES_PROMPT = Template(
    """Estimate the calories in this amount of food.

RULES:
1. Use the stated grams; the portion text is only a hint
2. Consider cooking method (grilled vs fried)
3. Be conservative but realistic

EXAMPLES:
Food: "cheddar cheese", 20 g (1 slice)
Output: {"calories": 80}

Food: "white rice", 200 g (1 cup cooked)
Output: {"calories": 260}

Return ONLY a JSON object:
{"calories": number}

FOOD: "$ingredient"
AMOUNT: $grams g ($portion)"""
)
