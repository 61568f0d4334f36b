import json
import re
from datetime import date
from typing import List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from order_portal.ai.prompts import SYSTEM_PROMPT
from order_portal.config import get_config
from order_portal.data.catalog import PRODUCT_CATALOG
from order_portal.data.models import OrderItem, ParsedOrder, SalesOrder
from order_portal.errors import AIParserError
from order_portal.logging import get_logger


class OrderTextParser:
    """Turns free text (a WhatsApp message, a dictated order) into an order draft."""

    def __init__(self, llm=None, catalog: Optional[List[str]] = None):
        self.config = get_config()
        self.logger = get_logger(__name__)
        self.catalog = catalog or PRODUCT_CATALOG
        self.llm = llm if llm is not None else self._build_llm()

    def _build_llm(self):
        if not self.config.ai_api_key:
            self.logger.warning("AI API key is missing. AI features will be disabled.")
            return None
        return ChatOpenAI(
            model=self.config.ai_model,
            api_key=self.config.ai_api_key,
            base_url=self.config.ai_base_url or None,
            temperature=self.config.ai_temperature,  # low for strict JSON
            max_tokens=1024,
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    def parse(self, text: str, today: Optional[date] = None) -> ParsedOrder:
        """
        Sends ``text`` to the model and validates the fixed JSON schema it returns.
        Raises AIParserError when the client is not configured or the answer is unusable.
        """
        if not self.enabled:
            raise AIParserError("AI client not initialized. Please check API key.")
        if not text or not text.strip():
            raise AIParserError("Nothing to parse")

        today = today or date.today()
        messages = [
            SystemMessage(content=SYSTEM_PROMPT.format(catalog=", ".join(self.catalog), today=today.isoformat())),
            HumanMessage(content=text),
        ]
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            self.logger.error(f"Error parsing order: {e}")
            raise AIParserError(f"AI request failed: {e}") from e

        raw_content = response.content if isinstance(response.content, str) else ""
        if not raw_content.strip():
            raise AIParserError("No data returned from AI")

        try:
            parsed = ParsedOrder.model_validate(json.loads(self._clean_json_response(raw_content)))
        except (json.JSONDecodeError, ValidationError) as e:
            self.logger.error(f"Extraction error: {e}")
            raise AIParserError(f"AI answer does not match the order schema: {e}") from e

        if not parsed.order_date:
            parsed = parsed.model_copy(update={"order_date": today.isoformat()})
        self.logger.info(f"Parsed {len(parsed.items)} items for '{parsed.customer_name}'")
        return parsed

    def _clean_json_response(self, text: str) -> str:
        """Removes markdown code blocks if the AI adds them."""
        text = text.strip()
        if text.startswith("```"):
            text = re.sub(r"^```(json)?", "", text)
            text = re.sub(r"```$", "", text)
        return text.strip()


def apply_parsed(draft: SalesOrder, parsed: ParsedOrder) -> SalesOrder:
    """Spread the parsed fields over the form draft; parsed items get fresh ids."""
    items = [OrderItem(item_name=i.item_name, quantity=i.quantity, notes=i.notes) for i in parsed.items]
    return draft.model_copy(update={
        "customer_name": parsed.customer_name or draft.customer_name,
        "area_location": parsed.area_location or draft.area_location,
        "order_date": parsed.order_date or draft.order_date,
        "items": items,
    })
