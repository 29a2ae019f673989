"""
Listing Scraper

Finds the first near-mint (NM) listing for a card on the marketplace and
reads its price and stock by adding it to the cart.

The flow for one card is:
    navigate -> settle -> dismiss cookie banner -> locate seller list ->
    for each seller: read labels, skip non-NM, click "buy", open the cart,
    read the matching cart row, remove it, stop.

The first NM seller whose item shows up in the cart wins; sellers are not
compared on price. Returns None when nothing qualifies.
"""

import logging
import time
from dataclasses import dataclass

from monitoring.errors import ElementNotFound, NavigationError
from monitoring.models import ListingObservation
from utils.number_parsing import parse_price, parse_quantity

logger = logging.getLogger(__name__)

NEAR_MINT_MARKER = "NM"

COOKIE_BANNER = "#lgpd-cookie"
COOKIE_BUTTON = "button"
SELLER_LIST = "#marketplace-stores"
SELLER = ".store"
SELLER_LABELS = ".infos-quality-and-language.desktop-only"
LANGUAGE_LABEL = "img"
CONDITION_LABEL = ".quality"
BUY_BUTTON = "div.btn-green.cursor-pointer"
CART_ICON = "div.cart-icon-container.icon-container"
VIEW_CART_BUTTON = "a.btn-view-cart"
CART_ITEMS = "div.itens"
CART_ROW = "div.row"
CART_ROW_TITLE = "p.cardtitle a"
CART_ROW_STOCK = "div.item-estoque"
CART_ROW_TOTAL = "div.preco-total.item-total"
CART_ROW_REMOVE = "div.btn-circle.remove.delete.item-delete"


@dataclass
class StepResult:
    """Outcome of a best-effort page step. Failures here never abort a card."""

    ok: bool
    error: Exception = None

    @classmethod
    def done(cls):
        return cls(True)

    @classmethod
    def skipped(cls, reason):
        return cls(False, ElementNotFound(reason))

    @classmethod
    def failed(cls, error):
        return cls(False, error)


def ignore_failure(step_name, result):
    """Consume a best-effort step result, logging and carrying on when it failed."""
    if not result.ok:
        logger.debug(f"Ignoring {step_name}: {result.error}")
    return result.ok


def build_card_url(website, card):
    """
    Build the marketplace query URL for a card.

    Example:
        build_card_url("https://www.ligapokemon.com.br/", CardIdentity("Pikachu ex", "SVP", "27"))
        -> "https://www.ligapokemon.com.br/?view=cards/card&card=Pikachu%20ex%20(27)&ed=SVP&num=27"
    """
    name = card.name.replace(" ", "%20")
    return (
        f"{website}?view=cards/card&card={name}%20({card.number})"
        f"&ed={card.collection}&num={card.number}"
    )


class ListingScraper:
    """
    Drives one automation session through the marketplace pages.

    Args:
        session: An open AutomationSession (or anything with the same primitives)
        settings (Settings): Website and delay configuration
        sleep (callable): Blocking wait, injectable for tests
    """

    def __init__(self, session, settings, sleep=time.sleep):
        self.session = session
        self.settings = settings
        self.sleep = sleep

    def scrape(self, card):
        """
        Sample the first NM listing for a card.

        Args:
            card (CardIdentity): Card to look up

        Returns:
            ListingObservation or None: None when no NM listing reached the cart

        Raises:
            NavigationError: If the card page could not be loaded
            SessionError: If the browser session stopped responding
        """
        url = build_card_url(self.settings.website, card)
        logger.debug(f"Navigating to {url}")
        self.session.navigate(url)
        self.sleep(self.settings.settle_delay)

        ignore_failure("cookie banner", self.dismiss_cookie_banner())

        seller_list = self.session.find_one(SELLER_LIST)
        if seller_list is None:
            logger.info(f"No sellers listed for {card.label()}")
            return None

        for seller in self.session.find_many(SELLER, within=seller_list):
            try:
                observation = self._try_seller(card, seller)
            except ElementNotFound as e:
                logger.debug(f"Skipping seller for {card.label()}: {e}")
                continue
            if observation is not None:
                return observation

        return None

    def scrape_many(self, cards):
        """Scrape several cards with this session, skipping pages that fail to load."""
        observations = []
        for card in cards:
            try:
                observation = self.scrape(card)
            except NavigationError as e:
                logger.warning(f"Skipping {card.label()}: {e}")
                continue
            if observation is not None:
                observations.append(observation)
        return observations

    def _try_seller(self, card, seller):
        language, condition = self.read_labels(seller)
        if NEAR_MINT_MARKER not in condition.upper():
            return None

        buy_button = self.session.find_one(BUY_BUTTON, within=seller)
        if buy_button is None:
            return None

        ignore_failure("cookie banner", self.dismiss_cookie_banner())
        self.session.click(buy_button)
        self.sleep(self.settings.click_delay)

        ignore_failure("cart opening", self.open_cart())

        # The item stays in the cart when its row cannot be found.
        row = self.find_cart_row(card)
        if row is None:
            logger.debug(f"Cart row for {card.label()} not found")
            return None

        quantity, price = self.read_cart_row(row)
        ignore_failure("cart row removal", self.remove_cart_row(row))

        return ListingObservation(
            card=card,
            condition=condition,
            language=language,
            quantity=quantity,
            price=price,
            total_price=price,
        )

    def dismiss_cookie_banner(self):
        banner = self.session.find_one(COOKIE_BANNER)
        if banner is None:
            return StepResult.skipped("no cookie banner")
        button = self.session.find_one(COOKIE_BUTTON, within=banner)
        if button is None:
            return StepResult.skipped("cookie banner has no button")
        try:
            self.session.click(button)
        except ElementNotFound as e:
            return StepResult.failed(e)
        self.sleep(self.settings.click_delay)
        logger.debug("Cookie banner dismissed")
        return StepResult.done()

    def read_labels(self, seller):
        """
        Read the language and condition labels of a seller block.

        Returns:
            tuple: (language, condition); condition is "" unless an NM label exists
        """
        labels = self.session.find_one(SELLER_LABELS, within=seller)
        if labels is None:
            return "", ""

        language = ""
        for image in self.session.find_many(LANGUAGE_LABEL, within=labels):
            title = self.session.attribute(image, "title")
            if title:
                language = title
                break

        condition = ""
        for quality in self.session.find_many(CONDITION_LABEL, within=labels):
            title = self.session.attribute(quality, "title") or ""
            if NEAR_MINT_MARKER in title.upper():
                condition = title
                break

        return language, condition

    def open_cart(self):
        icon = self.session.find_one(CART_ICON)
        if icon is None:
            return StepResult.skipped("cart icon not found")
        try:
            self.session.click(icon)
            self.sleep(self.settings.click_delay)

            view_cart = self.session.find_one(VIEW_CART_BUTTON)
            if view_cart is None:
                return StepResult.skipped("view cart button not found")
            self.session.click(view_cart)
        except ElementNotFound as e:
            return StepResult.failed(e)
        self.sleep(self.settings.settle_delay)
        return StepResult.done()

    def find_cart_row(self, card):
        """Return the cart row whose title mentions the card name and "(number)"."""
        items = self.session.find_one(CART_ITEMS)
        if items is None:
            return None

        number_tag = f"({card.number})"
        for row in self.session.find_many(CART_ROW, within=items):
            title = self.session.find_one(CART_ROW_TITLE, within=row)
            if title is None:
                continue
            text = self.session.text(title)
            if card.name in text and number_tag in text:
                return row
        return None

    def read_cart_row(self, row):
        """
        Returns:
            tuple: (quantity, total price); unreadable values become 0
        """
        quantity = 0
        stock = self.session.find_one(CART_ROW_STOCK, within=row)
        if stock is not None:
            quantity = parse_quantity(self.session.text(stock))

        price = 0.0
        total = self.session.find_one(CART_ROW_TOTAL, within=row)
        if total is not None:
            price = parse_price(self.session.text(total))

        return quantity, price

    def remove_cart_row(self, row):
        button = self.session.find_one(CART_ROW_REMOVE, within=row)
        if button is None:
            return StepResult.skipped("remove button not found")
        try:
            self.session.click(button)
        except ElementNotFound as e:
            return StepResult.failed(e)
        self.sleep(self.settings.click_delay)
        return StepResult.done()
