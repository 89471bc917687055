"""Tool-augmented reply generation for the plant-care chatbot."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from models.conversation_models import MODEL_ROLE, Turn
from services.chat.market_price import (
	MARKET_PRICE_FUNCTION,
	MARKET_PRICE_FUNCTION_NAME,
	SimulatedMarketPriceSource,
)
from services.chat.prompts import chatbot_system_prompt
from services.openai.media_inputs import text_message
from services.openai.response_parser import extract_text, iter_function_calls
from utils.retry import with_retry

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")

FALLBACK_REPLY = "I'm sorry, I'm having trouble answering right now. Please try again in a moment."


@dataclass
class ConversationReply:
	reply: str
	tool_calls: List[Dict[str, Any]] = field(default_factory=list)
	fallback: bool = False


def _provider_message(turn: Turn) -> Dict[str, Any]:
	if turn.role == MODEL_ROLE:
		return {"type": "message", "role": "assistant", "content": [{"type": "output_text", "text": turn.content}]}
	return text_message("user", turn.content)


class ConversationResponder:
	"""Answer the newest user message given the confirmed conversation so far.

	Failures never propagate: the caller always receives a reply, degraded to
	`FALLBACK_REPLY` when the provider cannot produce one.
	"""

	def __init__(
		self,
		client: AsyncOpenAI,
		*,
		price_source: Optional[SimulatedMarketPriceSource] = None,
		model: str = DEFAULT_MODEL,
		max_retries: int = 3,
		retry_delay: float = 1.0,
		max_tool_rounds: int = 3,
	) -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.price_source = price_source or SimulatedMarketPriceSource()
		self.model = model
		self.max_retries = max_retries
		self.retry_delay = retry_delay
		self.max_tool_rounds = max_tool_rounds

	async def respond(self, history: Sequence[Turn], message: str, language: Optional[str] = None) -> ConversationReply:
		"""Return the reply to `message`; `history` must not contain `message` itself."""
		tool_calls: List[Dict[str, Any]] = []
		try:
			reply = await self._generate(history, message, language, tool_calls)
		except Exception as exc:
			LOGGER.error("Chatbot reply failed: %s", exc)
			return ConversationReply(reply=FALLBACK_REPLY, tool_calls=tool_calls, fallback=True)
		if not reply:
			LOGGER.error("Chatbot reply was empty")
			return ConversationReply(reply=FALLBACK_REPLY, tool_calls=tool_calls, fallback=True)
		return ConversationReply(reply=reply, tool_calls=tool_calls)

	async def _generate(
		self,
		history: Sequence[Turn],
		message: str,
		language: Optional[str],
		tool_calls: List[Dict[str, Any]],
	) -> str:
		inputs: List[Dict[str, Any]] = [text_message("system", chatbot_system_prompt(language))]
		inputs.extend(_provider_message(turn) for turn in history)
		inputs.append(text_message("user", message))

		for _ in range(self.max_tool_rounds + 1):
			response = await with_retry(
				lambda: self.client.responses.create(
					model=self.model,
					input=list(inputs),
					tools=[MARKET_PRICE_FUNCTION],
				),
				max_retries=self.max_retries,
				initial_delay=self.retry_delay,
			)
			calls = iter_function_calls(response)
			if not calls:
				return extract_text(response).strip()
			for call in calls:
				output = await self._run_tool(call)
				tool_calls.append({"name": call["name"], "arguments": json.loads(call["arguments"]), "output": output})
				inputs.append(
					{
						"type": "function_call",
						"call_id": call["call_id"],
						"name": call["name"],
						"arguments": call["arguments"],
					}
				)
				inputs.append({"type": "function_call_output", "call_id": call["call_id"], "output": json.dumps(output)})
		raise RuntimeError("Tool call limit reached without a reply.")

	async def _run_tool(self, call: Dict[str, str]) -> Dict[str, Any]:
		if call["name"] != MARKET_PRICE_FUNCTION_NAME:
			raise RuntimeError(f"Model requested unknown tool '{call['name']}'")
		args = json.loads(call["arguments"])
		quote = await self.price_source.quote(args.get("crop_name", ""))
		LOGGER.info("Market price for %s: %.2f %s", quote.crop_name, quote.price, quote.currency)
		return quote.to_dict()
