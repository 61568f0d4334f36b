import json
from datetime import date

import pytest

from order_portal.ai.parser import OrderTextParser, apply_parsed
from order_portal.config import set_config_for_test
from order_portal.data.models import OrderItem, ParsedItem, ParsedOrder, SalesOrder
from order_portal.errors import AIParserError

TODAY = date(2024, 5, 1)


class FakeMessage:
    def __init__(self, content):
        self.content = content


class FakeLLM:
    """Records the prompt and replays a canned answer."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        if self.error:
            raise self.error
        return FakeMessage(self.content)


@pytest.fixture(autouse=True)
def test_config():
    set_config_for_test(ai_api_key=None)


def answer(**overrides):
    data = {
        "customerName": "Al Nour Bakery",
        "areaLocation": "Nasr City",
        "orderDate": "2024-05-02",
        "items": [{"itemName": "Bran 40kg", "quantity": 20, "notes": None}],
    }
    data.update(overrides)
    return json.dumps(data)


def test_disabled_without_api_key():
    parser = OrderTextParser()
    assert not parser.enabled
    with pytest.raises(AIParserError):
        parser.parse("20 bran for Al Nour")


def test_parse_valid_answer():
    llm = FakeLLM(answer())
    parsed = OrderTextParser(llm=llm).parse("20 bran for Al Nour in Nasr City", today=TODAY)
    assert parsed.customer_name == "Al Nour Bakery"
    assert parsed.area_location == "Nasr City"
    assert parsed.order_date == "2024-05-02"
    assert parsed.items == [ParsedItem(item_name="Bran 40kg", quantity=20)]

    system, human = llm.messages
    assert "Bran 40kg" in system.content
    assert "2024-05-01" in system.content
    assert human.content == "20 bran for Al Nour in Nasr City"


def test_catalog_can_be_overridden():
    llm = FakeLLM(answer())
    OrderTextParser(llm=llm, catalog=["Special Mix 5kg"]).parse("x", today=TODAY)
    assert "Special Mix 5kg" in llm.messages[0].content
    assert "Bran 40kg" not in llm.messages[0].content


def test_missing_date_defaults_to_today():
    parsed = OrderTextParser(llm=FakeLLM(answer(orderDate=None))).parse("order", today=TODAY)
    assert parsed.order_date == "2024-05-01"


def test_code_fences_are_stripped():
    fenced = "```json\n" + answer() + "\n```"
    parsed = OrderTextParser(llm=FakeLLM(fenced)).parse("order", today=TODAY)
    assert parsed.customer_name == "Al Nour Bakery"


@pytest.mark.parametrize("content", ["", "   ", "not json at all", json.dumps({"customerName": "x"}), json.dumps([1, 2])])
def test_unusable_answers(content):
    with pytest.raises(AIParserError):
        OrderTextParser(llm=FakeLLM(content)).parse("order", today=TODAY)


def test_empty_text_is_refused():
    llm = FakeLLM(answer())
    with pytest.raises(AIParserError):
        OrderTextParser(llm=llm).parse("  ")
    assert llm.messages is None


def test_model_failure_becomes_parser_error():
    with pytest.raises(AIParserError):
        OrderTextParser(llm=FakeLLM(error=RuntimeError("quota exceeded"))).parse("order")


def test_apply_parsed_fills_the_draft():
    draft = SalesOrder(
        customer_name="Old",
        area_location="Old area",
        overall_notes="keep me",
        items=[OrderItem(item_name="Pastry Flour 10kg", quantity=1)],
    )
    parsed = ParsedOrder(
        customer_name="Golden Loaf",
        area_location="",
        order_date="2024-05-03",
        items=[ParsedItem(item_name="Bran 40kg", quantity=3, notes="urgent")],
    )
    filled = apply_parsed(draft, parsed)
    assert filled.customer_name == "Golden Loaf"
    assert filled.area_location == "Old area"
    assert filled.order_date == "2024-05-03"
    assert filled.overall_notes == "keep me"
    assert [(i.item_name, i.quantity, i.notes) for i in filled.items] == [("Bran 40kg", 3, "urgent")]
    assert filled.items[0].id
