import os
from fastapi.templating import Jinja2Templates
from .config import settings


def money_filter(cents: int | None) -> str:
    """A Jinja2 filter rendering integer cents as a price, e.g. 150000 -> ₹1,500.00."""
    if cents is None:
        return ""
    return f"{settings.CURRENCY_SYMBOL}{cents / 100:,.2f}"


def hours_filter(hours: int) -> str:
    """A Jinja2 filter labelling a price tier duration."""
    return "1 hour" if hours == 1 else f"{hours} hours"


# Create a single, shared Jinja2Templates instance
templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))
templates.env.filters["money"] = money_filter
templates.env.filters["hours"] = hours_filter
templates.env.globals["app_name"] = settings.APP_NAME
