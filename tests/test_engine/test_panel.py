from __future__ import annotations

import pytest

from option_inquiry.engine.panel import (
    BROKER_ROSTER,
    anchored_panel,
    panel_average,
    panel_implied_volatility,
    synthetic_panel,
    theoretical_base_price,
)
from option_inquiry.models.quote import BrokerQuote, OptionSide, Tenor


def test_roster_is_fixed_and_ordered() -> None:
    assert [broker.broker_id for broker in BROKER_ROSTER] == ["YAQZ", "YHQZ", "ZXZZ", "ZSQH", "ZJ", "GJQZ"]
    assert BROKER_ROSTER[0].color == "#E74C3C"
    assert BROKER_ROSTER[4].base_iv == pytest.approx(3.08)


def test_anchored_panel_stays_within_variance_band() -> None:
    panel = anchored_panel(2.5, code="600519", tenor=Tenor.M1, side=OptionSide.CALL, ratio=100)

    assert [quote.broker_id for quote in panel] == [broker.broker_id for broker in BROKER_ROSTER]
    for quote in panel:
        assert 2.5 * 0.85 <= quote.price <= 2.5 * 1.15
    assert panel[0].price == pytest.approx(2.6005)
    assert panel[0].implied_volatility == "3.87%"
    assert panel[1].implied_volatility == "4.91%"
    assert panel[0].display_color == "#E74C3C"


def test_anchored_panel_iv_scales_with_skew_and_term() -> None:
    atm = anchored_panel(1.0, code="600519", tenor=Tenor.M1, side=OptionSide.PUT, ratio=100)
    wing = anchored_panel(1.0, code="600519", tenor=Tenor.M12, side=OptionSide.PUT, ratio=85)

    for near, far in zip(atm, wing):
        assert float(far.implied_volatility.rstrip("%")) > float(near.implied_volatility.rstrip("%"))
        assert far.price == near.price


def test_theoretical_base_price_for_out_of_the_money_uses_seeded_time_value() -> None:
    base = theoretical_base_price(code="600000", spot=104.0, strike=104.0, tenor=Tenor.M1, side=OptionSide.CALL)

    assert base == pytest.approx(0.936)


def test_theoretical_base_price_for_in_the_money_uses_intrinsic_value() -> None:
    call = theoretical_base_price(code="600000", spot=104.0, strike=93.6, tenor=Tenor.M1, side=OptionSide.CALL)
    put = theoretical_base_price(code="600000", spot=100.0, strike=110.0, tenor=Tenor.M3, side=OptionSide.PUT)

    assert call == pytest.approx(0.08)
    assert put == pytest.approx(0.1 * 1.8 * 0.8)


def test_theoretical_base_price_has_floor() -> None:
    base = theoretical_base_price(code="600000", spot=100.0, strike=99.999, tenor=Tenor.W2, side=OptionSide.CALL)

    assert base == pytest.approx(0.01)


def test_synthetic_panel_prices_and_volatility() -> None:
    panel = synthetic_panel(code="600000", spot=104.0, strike=104.0, tenor=Tenor.M1, side=OptionSide.CALL)

    assert len(panel) == 6
    assert panel[0].price == pytest.approx(0.9694)
    assert panel[0].implied_volatility == "4.04%"
    for quote in panel:
        assert 0.936 * 0.85 <= quote.price <= 0.936 * 1.15


def test_synthetic_panel_adjusts_deep_moneyness() -> None:
    deep_itm = synthetic_panel(code="600000", spot=104.0, strike=150.0, tenor=Tenor.M1, side=OptionSide.PUT)
    deep_otm = synthetic_panel(code="600000", spot=104.0, strike=150.0, tenor=Tenor.M1, side=OptionSide.CALL)
    base_itm = (150.0 - 104.0) / 104.0 * 0.8
    base_otm = 9 / 1000 * 104.0

    assert deep_itm[0].price == pytest.approx(round(base_itm * 1.0357 * 1.2, 4))
    assert deep_otm[0].price == pytest.approx(round(base_otm * 1.0357 * 0.8, 4))


def test_panel_average_and_implied_volatility() -> None:
    panel = [
        BrokerQuote(broker_id="A", price=1.0, implied_volatility="4.00%", display_color="#000"),
        BrokerQuote(broker_id="B", price=2.0, implied_volatility="5.00%", display_color="#fff"),
    ]

    assert panel_average(panel) == pytest.approx(1.5)
    assert panel_implied_volatility(panel) == "4.50%"
    assert panel_average([]) == 0.0
    assert panel_implied_volatility([]) == "0.00%"
