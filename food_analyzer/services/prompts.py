"""
AI prompt templates for package identification, ingredient extraction and
personalised health analysis.

All prompts follow medical ethics guidelines:
- Use qualified language ("may be associated with", not "causes")
- Never diagnose conditions
- Recommend professional consultation
"""

# =============================================================================
# PACKAGE IMAGES (front + back)
# =============================================================================

FOOD_IDENTIFICATION_SYSTEM_PROMPT = (
    "You are a food investigator. Your job is to understand the name and what food product it is."
)

FOOD_IDENTIFICATION_USER_PROMPT = """Focus only on the food product present in the image and ignore everything else.
Tell what is the name of the product and what type of food product it is.
If the image does not contain any food product, simply answer 'no food product present'.
Return:
1. The name of the product
2. The type of food product.
3. Health claim that the product makes, if any.
Don't give any description or any other information about the image."""

INGREDIENT_EXTRACTION_SYSTEM_PROMPT = (
    "You are a food investigator. Your job is to understand the ingredients present in a food product."
)

INGREDIENT_EXTRACTION_USER_PROMPT = """Focus only on the food product present in the image and ignore everything else.
List all the ingredients and other nutrients present in this food product. Carefully examine all the sections and extract any part which contains anything related to ingredients or nutrients.
If the image does not contain any food product, simply answer 'no food product present'.
Return just the ingredients and other nutrients present in the food product. Don't give any description or any other information about the image."""

# =============================================================================
# HEALTH ANALYSIS
# =============================================================================

HEALTH_ANALYSIS_SYSTEM_PROMPT = """You are a dietitian. Your job is to understand the ingredients present in a food product and tell a patient whether it is good for their health.
If the patient has any pre-existing disease, health condition or food allergy, correlate the ingredients/nutrients present in the product with the disease/allergy and explain the benefits and/or drawbacks of having the food product."""

HEALTH_ANALYSIS_USER_TEMPLATE = """The ingredients present in the food are {food_ingredients}.
The profile of the patient is age = {age}, gender = {gender}, height = {height}, weight = {weight}, food allergy = {food_allergy}.
The pre-existing diseases are {existing_disease} and other health conditions are {other_health_condition}.

Some food related dos and don'ts for the diseases and health conditions are given below between the WEB DATA markers. Use them as guidelines, and cite which part of your answer was picked from which page.
WEB DATA START
{web_data}
WEB DATA END

Clearly tell the patient these sections:
1. If there is any difference between the claim that the product makes on the front of the package, described here: {food_name}, and the ingredients present on the back of the package, clearly tell the patient about it.
2. What is good about having this food?
3. What is bad about having this food?

Keep it short, concise and professional.
Don't give any summary table.
Don't give the output in markdown format.
Give all the references at the end of the answer. Always provide the actual website link with https://
Always give a caution message at the end of the answer to consult a doctor or dietitian for any health complications or serious health issues.
The output will be shown in a terminal, so format it as plain text."""


def build_health_analysis_message(profile, food_name: str, food_ingredients: str, web_data: str) -> str:
    """Fill the health analysis template from a HealthProfile and extracted texts."""
    return HEALTH_ANALYSIS_USER_TEMPLATE.format(
        food_ingredients=food_ingredients,
        age=profile.age,
        gender=profile.gender.value,
        height=profile.height_display,
        weight=profile.weight_display,
        food_allergy=profile.food_allergy or "none",
        existing_disease=profile.existing_disease or "none",
        other_health_condition=profile.other_health_condition or "none",
        web_data=web_data or "No web data available.",
        food_name=food_name,
    )
