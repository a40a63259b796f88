import pytest

from measurement_protocol.errors import ValidationError
from measurement_protocol.parameters import HitParameters


@pytest.mark.unit
class TestProducts:

    def test_products_get_consecutive_slots(self) -> None:
        hit = HitParameters()

        hit.add_product(sku="P1", name="Shirt", price=19.5, quantity=2)
        hit.add_product(sku="P2", custom_dimension_3="large", custom_metric_1=4)

        assert hit.as_dict() == {
            "pr1id": "P1",
            "pr1nm": "Shirt",
            "pr1pr": "19.5",
            "pr1qt": "2",
            "pr2id": "P2",
            "pr2cd3": "large",
            "pr2cm1": "4",
        }

    def test_unknown_product_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            HitParameters().add_product(sku="P1", colour="red")

        assert exc_info.value.field == "product.colour"

    def test_invalid_product_value(self) -> None:
        with pytest.raises(ValidationError):
            HitParameters().add_product(sku="P1", quantity="two")

    def test_empty_product(self) -> None:
        with pytest.raises(ValidationError, match="at least one field"):
            HitParameters().add_product(name=None)

    def test_product_action_does_not_count_as_product(self) -> None:
        hit = HitParameters().set("product_action", "purchase").set("promotion_action", "click")

        hit.add_product(sku="P1")

        assert hit.get("pr1id") == "P1"


@pytest.mark.unit
class TestImpressionsAndPromotions:

    def test_impressions_share_list_slot(self) -> None:
        hit = HitParameters()

        hit.add_impression("Search Results", sku="A", position=1)
        hit.add_impression("Search Results", sku="B", position=2)
        hit.add_impression("Related", sku="C")

        assert hit.as_dict() == {
            "il1nm": "Search Results",
            "il1pi1id": "A",
            "il1pi1ps": "1",
            "il1pi2id": "B",
            "il1pi2ps": "2",
            "il2nm": "Related",
            "il2pi1id": "C",
        }

    def test_impression_rejects_quantity(self) -> None:
        with pytest.raises(ValidationError):
            HitParameters().add_impression("List", sku="A", quantity=1)

    def test_promotions(self) -> None:
        hit = HitParameters().set("promotion_action", "view")

        hit.add_promotion(id="PROMO_1", name="Summer", creative="banner", position="top")
        hit.add_promotion(id="PROMO_2")

        assert hit.get("promo1id") == "PROMO_1"
        assert hit.get("promo1cr") == "banner"
        assert hit.get("promo2id") == "PROMO_2"

    def test_promotion_rejects_custom_dimensions(self) -> None:
        with pytest.raises(ValidationError):
            HitParameters().add_promotion(id="P", custom_dimension_1="x")
