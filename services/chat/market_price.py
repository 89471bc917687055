"""Market price lookup exposed to the chatbot as a function tool."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

MARKET_PRICE_FUNCTION_NAME = "get_market_price"

MARKET_PRICE_FUNCTION: Dict[str, Any] = {
	"type": "function",
	"name": MARKET_PRICE_FUNCTION_NAME,
	"description": "Get the current market price for a specific crop.",
	"parameters": {
		"type": "object",
		"properties": {
			"crop_name": {
				"type": "string",
				"description": 'The name of the crop to get the price for, e.g., "organic basil"',
			},
		},
		"required": ["crop_name"],
		"additionalProperties": False,
	},
	"strict": True,
}


@dataclass(frozen=True)
class MarketPriceQuote:
	crop_name: str
	price: float
	currency: str = "USD"
	unit: str = "lb"

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


class SimulatedMarketPriceSource:
	"""Plausible per-pound prices; not a real-time feed."""

	def __init__(self, rng: Optional[random.Random] = None) -> None:
		self._rng = rng or random.Random()

	async def quote(self, crop_name: str) -> MarketPriceQuote:
		name = crop_name.strip()
		if not name:
			raise ValueError("crop_name is required.")
		return MarketPriceQuote(crop_name=name, price=round(self._rng.uniform(1.0, 6.0), 2))
