"""
LLM Integration for Construction Docs QA.

Provides LLM functionality for:
- Answering questions from a citation-bearing context
- Summarizing a batch of project documents into structured JSON

Uses the OpenAI chat completions API with GPT-4o-mini by default. Any
OpenAI-compatible endpoint works, including OpenRouter.
"""

import json
import os
from typing import Dict, List, Optional

from .exceptions import ProviderUnavailableError
from .retriever import NOT_FOUND_ANSWER
from .utils import print_safe


# Default configuration
DEFAULT_MODEL = "gpt-4o-mini"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0

ANSWER_SYSTEM_PROMPT = f"""You are AOSAI (Automated Operations & Structural Analysis Intelligence), a construction document assistant.
Answer ONLY using the provided context blocks. If the answer is not explicitly present in the context, reply exactly:
"{NOT_FOUND_ANSWER}"

Rules:
- Give a concise answer first.
- Say where exactly you found the data.
- Quote exact values (measurements, part numbers) when possible.
- Add 1-3 short bullets titled "Why", citing blocks like [#2], [#3], [#5].
- Do NOT invent data or speculate beyond the context."""

SUMMARY_SYSTEM_PROMPT = """You are AOSAI, a senior estimator & PM.
Return STRICT JSON following the schema. Do not include prose outside JSON.
Only include stakeholders that appear in the text and cite their page/section in "source".
If timeline is uncertain, include assumptions and set confidence low."""

SUMMARY_USER_PROMPT = """From the project documents below, produce a JSON object with keys:
- executive_summary: string (<= 180 words)
- key_objectives: string[]
- scope: {{ in_scope: string[], out_of_scope: string[] }}
- estimated_timeline: {{ overall_duration_days: number, milestones: [{{ name, duration_days, dependencies?, assumptions? }}], assumptions?: string[], confidence: "low" | "medium" | "high" }}
- tools_and_materials: {{ materials: [{{ name, qty?, notes? }}], tools: [{{ name, notes? }}] }}
- stakeholders: [{{ name, role?, email?, phone?, source }}]
- risks_and_mitigations: [{{ risk, impact: "low"|"med"|"high", mitigation }}]
- open_questions: string[]
- sources: string[]

Rules:
- Only list stakeholders if they appear in text; include "source" (file/page/section).
- If quantities are ambiguous, leave qty blank and add a note.
- Keep it concise and printable.

DOCUMENTS:
{corpus}"""


class ChatLLM:
    """
    LLM client for an OpenAI-compatible chat API.

    Example:
        >>> llm = ChatLLM()
        >>> answer = llm.answer("What is the slab thickness?", context_text)
        >>> print(answer)
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ):
        """
        Initialize the chat client.

        Args:
            model: Model identifier (e.g., "gpt-4o-mini", or "openai/gpt-4o-mini" on OpenRouter)
            api_key: API key. If not provided, reads OPENROUTER_API_KEY when base_url
                     points at OpenRouter, OPENAI_API_KEY otherwise.
            base_url: Optional API base URL (e.g., OPENROUTER_BASE_URL)
            timeout: Request timeout in seconds. Timeouts raise ProviderUnavailableError.

        Raises:
            ValueError: If API key is not found
            ImportError: If openai package is not installed
        """
        self.model = model
        self.timeout = timeout
        env_var = "OPENROUTER_API_KEY" if base_url == OPENROUTER_BASE_URL else "OPENAI_API_KEY"
        self.api_key = api_key or os.environ.get(env_var)

        if not self.api_key:
            raise ValueError(
                f"API key not found. Please set {env_var} environment variable:\n"
                f"  PowerShell: $env:{env_var} = 'your-key-here'\n"
                f"  Bash: export {env_var}='your-key-here'\n"
                "  Or pass api_key parameter directly."
            )

        try:
            import openai
            self._api_error = openai.APIError
            self.client = openai.OpenAI(
                api_key=self.api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0
            )
        except ImportError:
            raise ImportError("Please install openai: pip install openai")

        self.total_tokens = 0
        self.total_calls = 0

    def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> str:
        """
        Generate a response from the LLM.

        Args:
            messages: Chat messages ({"role": ..., "content": ...})
            temperature: Sampling temperature; None leaves the model default
            json_mode: Ask the API for a JSON object response

        Returns:
            Generated text response, stripped ("" if the model returned nothing)

        Raises:
            ProviderUnavailableError: If the request fails or times out
        """
        kwargs = {"model": self.model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except self._api_error as e:
            raise ProviderUnavailableError("chat", str(e)) from e

        self.total_calls += 1
        if response.usage:
            self.total_tokens += response.usage.total_tokens

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    def answer(self, question: str, context_text: str) -> str:
        """
        Answer a question using only the given context.

        An empty context returns NOT_FOUND_ANSWER without calling the API,
        as does an empty model reply.

        Args:
            question: User question
            context_text: Output of build_context

        Returns:
            Answer string grounded in the context
        """
        if not context_text.strip():
            return NOT_FOUND_ANSWER

        messages = [
            {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
            {"role": "user", "content": f"Question: {question}\n\nContext:\n{context_text}"}
        ]
        return self.generate(messages) or NOT_FOUND_ANSWER

    def summarize_project(self, corpus: str) -> Dict:
        """
        Summarize project documents into the summary JSON schema.

        Args:
            corpus: Documents formatted as "### FILE: <name>" blocks

        Returns:
            Parsed JSON object ({} if the reply is not valid JSON)
        """
        messages = [
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": SUMMARY_USER_PROMPT.format(corpus=corpus)}
        ]
        content = self.generate(messages, json_mode=True) or "{}"
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            print_safe("Warning: summary response was not valid JSON")
            return {}

    def get_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_calls": self.total_calls,
            "total_tokens": self.total_tokens,
            "model": self.model
        }
