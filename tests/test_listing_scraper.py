"""
Listing scraper tests against static marketplace pages.
"""

import pytest

from monitoring.errors import ElementNotFound, NavigationError
from monitoring.listing_scraper import ListingScraper, StepResult, build_card_url, ignore_failure
from monitoring.models import CardIdentity
from tests.fakes import FakeSession, card_page, cart_row_html, seller_html


def make_scraper(session, settings, sleeps=None):
    sleep = sleeps.append if sleeps is not None else (lambda seconds: None)
    return ListingScraper(session, settings, sleep=sleep)


def test_build_card_url_encodes_spaces_in_name():
    card = CardIdentity("Pikachu ex", "SVP", "27")

    url = build_card_url("https://www.ligapokemon.com.br/", card)

    assert url == (
        "https://www.ligapokemon.com.br/?view=cards/card"
        "&card=Pikachu%20ex%20(27)&ed=SVP&num=27"
    )


def test_first_near_mint_seller_with_cart_row_is_returned(settings, pikachu):
    page = card_page(
        sellers=[
            seller_html("A", "LP - Lightly Played", language="Inglês"),
            seller_html("B", "NM — Near Mint", language="Português"),
        ],
        cart_rows=[cart_row_html("Pikachu (27)", total="R$ 10,00")],
    )
    session = FakeSession(page)

    observation = make_scraper(session, settings).scrape(pikachu)

    assert observation is not None
    assert "NM" in observation.condition
    assert observation.language == "Português"
    assert observation.price == 10.0
    assert observation.total_price == 10.0
    assert observation.quantity == 3
    assert observation.card == pikachu
    assert session.clicked_sellers() == ["B"]


def test_missing_seller_list_returns_nothing(settings, pikachu):
    session = FakeSession(card_page(sellers=None))

    assert make_scraper(session, settings).scrape(pikachu) is None
    assert session.clicked_sellers() == []


def test_no_near_mint_seller_returns_nothing(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "SP"), seller_html("B", "HP")],
        cart_rows=[cart_row_html("Pikachu (27)")],
    )
    session = FakeSession(page)

    assert make_scraper(session, settings).scrape(pikachu) is None
    assert session.clicked_sellers() == []


def test_condition_match_is_case_insensitive(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "nm (near mint)")],
        cart_rows=[cart_row_html("Pikachu (27)")],
    )

    observation = make_scraper(FakeSession(page), settings).scrape(pikachu)

    assert observation.condition == "nm (near mint)"


def test_seller_without_buy_button_is_skipped(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM", buy=False), seller_html("B", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)")],
    )
    session = FakeSession(page)

    observation = make_scraper(session, settings).scrape(pikachu)

    assert observation is not None
    assert session.clicked_sellers() == ["B"]


def test_seller_whose_row_is_missing_falls_through_to_next(settings, pikachu):
    def on_click(session, element):
        if element.get("data-seller") == "B":
            session.add_cart_row(cart_row_html("Pikachu (27)", total="R$ 7,50"))

    page = card_page(sellers=[seller_html("A", "NM"), seller_html("B", "NM")])
    session = FakeSession(page, on_click=on_click)

    observation = make_scraper(session, settings).scrape(pikachu)

    assert observation.price == 7.5
    assert session.clicked_sellers() == ["A", "B"]


def test_iteration_stops_after_first_accepted_seller(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM"), seller_html("B", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)", total="R$ 99,00")],
    )
    session = FakeSession(page)

    observation = make_scraper(session, settings).scrape(pikachu)

    assert observation.price == 99.0
    assert session.clicked_sellers() == ["A"]


def test_cart_row_must_match_name_and_number(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM")],
        cart_rows=[cart_row_html("Pikachu (28)"), cart_row_html("Raichu (27)")],
    )

    assert make_scraper(FakeSession(page), settings).scrape(pikachu) is None


def test_unparsable_cart_values_become_zero(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)", stock="Esgotado", total="consulte")],
    )

    observation = make_scraper(FakeSession(page), settings).scrape(pikachu)

    assert observation.quantity == 0
    assert observation.price == 0.0


def test_cookie_banner_is_dismissed_and_row_removed(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)")],
    )
    session = FakeSession(page)

    make_scraper(session, settings).scrape(pikachu)

    clicked_tags = [el.name for el in session.clicked]
    assert clicked_tags[0] == "button"
    assert "item-delete" in session.clicked[-1].get("class")


def test_missing_cookie_banner_does_not_abort(settings, pikachu):
    page = card_page(
        sellers=[seller_html("A", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)")],
        cookie_banner=False,
    )

    assert make_scraper(FakeSession(page), settings).scrape(pikachu) is not None


def test_unclickable_buy_button_skips_seller(settings, pikachu):
    def on_click(session, element):
        if element.get("data-seller") == "A":
            raise ElementNotFound("element not interactable")

    page = card_page(
        sellers=[seller_html("A", "NM"), seller_html("B", "NM")],
        cart_rows=[cart_row_html("Pikachu (27)")],
    )
    session = FakeSession(page, on_click=on_click)

    observation = make_scraper(session, settings).scrape(pikachu)

    assert observation is not None
    assert session.clicked_sellers() == ["A", "B"]


def test_navigation_failure_raises(settings, pikachu):
    session = FakeSession({"Charizard": card_page(sellers=[])})

    with pytest.raises(NavigationError):
        make_scraper(session, settings).scrape(pikachu)


def test_settle_delay_follows_navigation(settings, pikachu):
    settings.settle_delay = 4.0
    sleeps = []

    make_scraper(FakeSession(card_page(sellers=None, cookie_banner=False)), settings, sleeps).scrape(pikachu)

    assert sleeps == [4.0]


def test_scrape_many_skips_pages_that_fail(settings, pikachu, charizard):
    session = FakeSession({
        "Charizard": card_page(
            sellers=[seller_html("A", "NM")],
            cart_rows=[cart_row_html("Charizard (125)", total="R$ 1.234,56")],
        ),
    })

    observations = make_scraper(session, settings).scrape_many([pikachu, charizard])

    assert [obs.card for obs in observations] == [charizard]
    assert observations[0].price == 1234.56


def test_ignore_failure_reports_outcome():
    assert ignore_failure("step", StepResult.done()) is True
    assert ignore_failure("step", StepResult.skipped("absent")) is False
