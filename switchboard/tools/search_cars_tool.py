# The module is to define the SearchCarsTool that queries a car listings API,
# falling back to labelled demonstration data when the API cannot be reached.
# Date: 2026-10-17
# Version: 0.1.0

import httpx
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Type

from .base_tool import BaseTool
from switchboard.core.config import get_settings
from switchboard.utils.logger import console

SEARCH_PAGE_SIZE = 12
LISTING_URL = "https://www.iautos.fr/annonce/{slug}"

DEMO_CARS: List[Dict[str, str]] = [
    {
        "id": "mock-1",
        "title": "Renault Clio V 1.0 TCe 100ch Intens",
        "price": "16,990 €",
        "year": "2021",
        "mileage": "35,400 km",
        "fuel": "Essence",
        "gearbox": "Manuelle",
        "location": "Paris (75)",
        "imageUrl": "https://upload.wikimedia.org/wikipedia/commons/thumb/5/5d/2019_Renault_Clio_Iconic_TCe_100.jpg/1200px-2019_Renault_Clio_Iconic_TCe_100.jpg",
        "link": "https://www.renault.fr",
    },
    {
        "id": "mock-2",
        "title": "Peugeot 208 II 1.2 PureTech 100ch Allure",
        "price": "17,500 €",
        "year": "2022",
        "mileage": "22,100 km",
        "fuel": "Essence",
        "gearbox": "Manuelle",
        "location": "Lyon (69)",
        "imageUrl": "https://upload.wikimedia.org/wikipedia/commons/thumb/f/f1/Peugeot_208_II_IMG_3566.jpg/1200px-Peugeot_208_II_IMG_3566.jpg",
        "link": "https://www.peugeot.fr",
    },
    {
        "id": "mock-3",
        "title": "Tesla Model 3 Standard Plus",
        "price": "34,900 €",
        "year": "2021",
        "mileage": "45,000 km",
        "fuel": "Électrique",
        "gearbox": "Automatique",
        "location": "Bordeaux (33)",
        "imageUrl": "https://upload.wikimedia.org/wikipedia/commons/thumb/9/91/2019_Tesla_Model_3_Performance_AWD_Front.jpg/1200px-2019_Tesla_Model_3_Performance_AWD_Front.jpg",
        "link": "https://www.tesla.com",
    },
    {
        "id": "mock-4",
        "title": "BMW Serie 1 118i 140ch M Sport",
        "price": "28,900 €",
        "year": "2023",
        "mileage": "12,500 km",
        "fuel": "Essence",
        "gearbox": "Automatique",
        "location": "Nice (06)",
        "imageUrl": "https://upload.wikimedia.org/wikipedia/commons/thumb/4/43/BMW_F40_IMG_2977.jpg/1200px-BMW_F40_IMG_2977.jpg",
        "link": "https://www.bmw.fr",
    },
]

DEMO_NOTE = "Note: Live search failed or is restricted. Showing demonstration data."


class SearchCarsInput(BaseModel):
    """
    Input model for the SearchCarsTool.
    Attributes:
        query (str): Brand, model or keywords to search for.
        sort_by_price (Optional[str]): 'asc' or 'desc' price ordering.
    """
    query: str = Field(..., description='The brand, model, or keywords to search for (e.g., "Renault Clio", "BMW X5").')
    sort_by_price: Optional[Literal["asc", "desc"]] = Field(default=None, description="Optional: Sort order for price.")


def simplify_listings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Reduces the raw API payload to the fields the model presents to the user."""
    if not isinstance(data, dict):
        raise ValueError("Unexpected car search payload.")
    items = data.get("items") or []
    if not isinstance(items, list):
        raise ValueError("Unexpected 'items' in car search payload.")
    cars = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("Unexpected listing in car search payload.")
        attributes = item.get("attributes") or {}
        localisation = item.get("localisation") or {}
        if not isinstance(attributes, dict) or not isinstance(localisation, dict):
            raise ValueError("Unexpected listing details in car search payload.")
        cars.append({
            "id": item.get("id"),
            "title": item.get("title"),
            "price": f"{item.get('price')} €",
            "year": attributes.get("attr_car_year"),
            "mileage": f"{attributes.get('attr_car_mileage')} km",
            "fuel": attributes.get("attr_car_energy"),
            "gearbox": attributes.get("attr_car_gearbox"),
            "location": f"{localisation.get('city')} ({localisation.get('postcode')})",
            "imageUrl": item.get("mainImageUrl"),
            "link": LISTING_URL.format(slug=item.get("seoSlug")),
        })
    return {"count": data.get("totalItems", len(cars)), "cars": cars}


def demo_listings() -> Dict[str, Any]:
    return {
        "result": "Successfully retrieved car listings (Demo Data).",
        "data": {
            "count": len(DEMO_CARS),
            "cars": [dict(car) for car in DEMO_CARS],
            "note": DEMO_NOTE,
        },
    }


class SearchCarsTool(BaseTool):
    """
    Searches car listings for sale in France. When the live API is unreachable
    or answers with an error, demonstration listings are returned and labelled as such.
    """
    name: str = "search_cars"
    description: str = "Search for cars for sale in France. Returns a list of vehicles with details like price, mileage, and images."
    args_schema: Type[BaseModel] = SearchCarsInput

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = get_settings()
        self._service_url = settings.CAR_SEARCH_API_URL
        self._timeout = settings.CAR_SEARCH_TIMEOUT_SECONDS
        self._transport = transport

    async def execute(self, query: str, sort_by_price: Optional[str] = None) -> Dict[str, Any]:
        console.info(f"Executing tool '{self.name}' with query: '{query}'")
        request_body = {
            "page": 1,
            "limit": SEARCH_PAGE_SIZE,
            "search": query,
            "subcategory": "sell",
            "order": {
                "price": sort_by_price or "asc",
                "createdAt": "desc",
            },
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(self._service_url, json=request_body)
                response.raise_for_status()
                result = simplify_listings(response.json())
            console.success(f"Tool '{self.name}' found {len(result['cars'])} listings for '{query}'.")
            return result
        except httpx.HTTPStatusError as e:
            console.warning(f"Car search API returned status {e.response.status_code}. Falling back to demonstration data.")
        except (httpx.HTTPError, ValueError) as e:
            console.warning(f"Live car search failed ({e!r}). Falling back to demonstration data.")

        return demo_listings()
