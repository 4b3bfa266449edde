import pytest

from shared.categories import (
    DEFAULT_EMOJI,
    TOTAL_BUDGET_CATEGORY,
    CustomCategory,
    KnownCategory,
    budget_categories,
    category_emoji,
    category_label,
    parse_category,
    reconcile_category,
)


def test_parse_known_and_custom_labels():
    assert parse_category("Food") is KnownCategory.FOOD
    assert parse_category("  Bills ") is KnownCategory.BILLS
    assert parse_category("food") == CustomCategory(label="food")
    assert parse_category("Coffee beans") == CustomCategory(label="Coffee beans")


@pytest.mark.parametrize("label", ["", "   ", None])
def test_parse_rejects_empty_labels(label):
    with pytest.raises(ValueError):
        parse_category(label)


def test_category_label_round_trips_the_display_text():
    assert category_label(KnownCategory.HEALTH) == "Health"
    assert category_label(CustomCategory(label="Pets")) == "Pets"


def test_reconcile_maps_client_presets():
    assert reconcile_category(parse_category("Eating Out")) is KnownCategory.FOOD
    assert reconcile_category(parse_category("Leisure")) is KnownCategory.ENTERTAINMENT
    assert reconcile_category(parse_category("Subscription")) is KnownCategory.BILLS
    assert reconcile_category(parse_category("Transport")) is KnownCategory.TRANSPORT
    assert reconcile_category(parse_category("Pets")) is None


def test_budget_categories_include_total():
    categories = budget_categories()

    assert categories[-1] == TOTAL_BUDGET_CATEGORY
    assert len(categories) == len(KnownCategory) + 1


def test_category_emoji():
    assert category_emoji("Eating Out") == "🍔"
    assert category_emoji("Pets") == DEFAULT_EMOJI
