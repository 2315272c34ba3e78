"""
Prompt Builder.

Pure functions that render the natural-language prompts sent to the LLM.
Inputs may be ORM rows, Pydantic payloads or plain dicts; missing optional
fields render as a literal placeholder so the output is deterministic.
"""
import json
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

NOT_PROVIDED = "Not provided"
NONE = "None"

STYLE_ANALYSIS_PROMPT = (
    "Analyze the user's communication style from their messages and provide a concise summary "
    "in JSON format with the following keys: tone (formal/casual/mixed), verbosity "
    "(concise/moderate/detailed), technicality (basic/intermediate/advanced), engagement "
    "(passive/active/very active). Respond only with the JSON object."
)

MESSAGE_SYSTEM_PROMPT = (
    "You are an expert in generating personalized customer messages that match specific writing "
    "styles and professional levels while maintaining context from previous interactions."
)

_PROFESSION_MARKER = "their profession is: "


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _text(obj: Any, name: str, placeholder: str = NOT_PROVIDED) -> str:
    value = _field(obj, name)
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    if hasattr(value, "value"):  # enums
        value = value.value
    return str(value)


def build_product_prompt(customer: Any, product: Any) -> str:
    """Interest prompt for one customer against one product."""
    return (
        f"Customer name: {_text(customer, 'name')}\n"
        f"Email: {_text(customer, 'email')}\n"
        f"Phone: {_text(customer, 'phone')}\n"
        f"Likes: {_text(customer, 'likes', NONE)}\n"
        f"Dislikes: {_text(customer, 'dislikes', NONE)}\n"
        "\n"
        f"Product: {_text(product, 'name')}\n"
        f"Category: {_text(product, 'category')}\n"
        f"Description: {_text(product, 'description')}\n"
        f"Keywords: {_text(product, 'keywords')}\n"
        "\n"
        "Based on the customer's likes and dislikes, assess the likelihood (as a percentage from 0 to 100) "
        "that they would be interested in purchasing this product and provide the main reason. "
        "Make sure the reason is 3 sentences. Start with the percentage, followed by the reason. "
        "If the same customer is given for the same product again, don't change the answer."
    )


def build_campaign_prompt(customer: Any, campaign: Any, product: Optional[Any] = None) -> str:
    """Interest prompt for one customer against a campaign, optionally with its product."""
    lines = [
        "Analyze the likelihood of customer interest in a marketing campaign.",
        "",
        "Customer Profile:",
        f"- Name: {_text(customer, 'name')}",
        f"- Interests/Likes: {_text(customer, 'likes', NONE)}",
        f"- Dislikes: {_text(customer, 'dislikes', NONE)}",
        "",
        "Campaign Details:",
        f"- Name: {_text(campaign, 'name')}",
        f"- Description: {_text(campaign, 'description')}",
        f"- Keywords: {_text(campaign, 'keywords')}",
        f"- Campaign Date: {_text(campaign, 'campaign_date')}",
    ]
    if product is not None:
        lines += [
            "",
            "Related Product:",
            f"- Name: {_text(product, 'name')}",
            f"- Description: {_text(product, 'description')}",
            f"- Keywords: {_text(product, 'keywords')}",
        ]
    lines += [
        "",
        "Analyze the following factors:",
        "1. Match between customer interests and campaign theme",
        "2. Timing of the campaign relative to customer profile",
        "3. Relevance of campaign keywords to customer interests",
        "4. Past customer preferences and behavior patterns",
    ]
    if product is not None:
        lines.append("5. Alignment with product characteristics")
    lines += [
        "",
        "Provide:",
        "1. A percentage (0-100) indicating the likelihood of customer interest",
        "2. A three-sentence explanation of the reasoning",
        "",
        "Format: Start with the percentage, followed by the explanation.",
        "If the same customer is given for the same campaign again, don't change the answer.",
    ]
    return "\n".join(lines)


def build_message_prompt(customer: Any, product: Any, profile: Any) -> str:
    """Outreach drafting prompt, conditioned on the seller's stored style and practice chat."""
    preference = _text(customer, "preferences", "mail")
    is_email = preference in ("mail", "email")
    style = _field(profile, "style")
    professional = _field(profile, "profession")
    chat_history = _field(profile, "chat_history")
    seller = _text(profile, "name")
    customer_name = _text(customer, "name")

    lines = [
        "Generate a personalized message for a customer about a product.",
        "",
        "Customer Details:",
        f"- Name: {customer_name}",
        f"- Likes: {_text(customer, 'likes', NONE)}",
        f"- Dislikes: {_text(customer, 'dislikes', NONE)}",
        "",
        "Product Details:",
        f"- Name: {_text(product, 'name')}",
        f"- Description: {_text(product, 'description')}",
        "",
        "Writing Style Instructions:",
    ]
    if style:
        lines.append(f"- Writing Style: {json.dumps(style) if not isinstance(style, str) else style}")
    if professional:
        lines.append(f"- Professional Level: {json.dumps(professional)}")
    lines += [
        "",
        "Previous Conversations for Context:",
        json.dumps(chat_history) if chat_history else "No previous conversations",
        "",
        f"The message should be in {'email' if is_email else preference} format and should be "
        "personalized based on their likes and dislikes.",
    ]
    if is_email:
        lines.append(
            "For email format, provide the subject line on the first line followed by the email content."
        )
    lines.append(
        "Please maintain consistency with the user's writing style and professional level while "
        "incorporating relevant context from previous conversations. "
        f"The Customer is {customer_name}. The person selling the product is {seller}."
    )
    return "\n".join(lines)


def extract_profession(messages: List[Dict[str, str]]) -> str:
    """Pull the profession out of the onboarding system message, if one was sent."""
    for message in messages:
        if message.get("role") != "system":
            continue
        content = message.get("content") or ""
        if _PROFESSION_MARKER in content:
            profession = content.split(_PROFESSION_MARKER, 1)[1].split(".", 1)[0].strip()
            if profession:
                return profession
    return "unknown"


def build_persona_system_prompt(profession: str) -> str:
    return (
        f"You are THE CUSTOMER. The user's profession is {profession}. Engage in brief conversations "
        "as if you are the customer trying to buy a product related to their profession. Inquire about "
        "the product, ask for a demo, and ask about the price."
    )
