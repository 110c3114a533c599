"""
smartassist/ai.py
AI delegate: appliance troubleshooting and photo analysis through an
OpenAI-compatible chat completions endpoint.

Both calls are stateless, single request/response, no retry. The caller gets
the model's raw text back; the only post-processing is the keyword scan in
extract_identified_issues().

Env vars (read via smartassist.config.Settings):
    OPENAI_API_KEY           - required when a call is actually made
    OPENAI_MODEL             - default 'gpt-5'
    OPENAI_BASE_URL (opt)    - override base URL if using Azure/proxy
    OPENAI_TIMEOUT_SECONDS   - default 60
    OPENAI_MAX_TOKENS        - default 2048
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from .config import Settings
from .timing import timed_block

log = logging.getLogger(__name__)

DIAGNOSIS_SYSTEM_PROMPT = """\
You are an expert appliance repair technician with decades of experience diagnosing and fixing home electronics and appliances.

Your role is to:
1. Ask clarifying questions to understand the exact issue
2. Provide step-by-step troubleshooting instructions
3. Identify likely causes and solutions
4. Recommend when professional help is needed

Be conversational, helpful, and specific. Use simple language that homeowners can understand. When providing steps, number them clearly."""

# (substring to look for, label reported to the user); order is the output order
ISSUE_KEYWORDS = (
    ("error code", "Error code detected"),
    ("damage", "Visible damage"),
    ("leak", "Potential leak"),
)


class AIError(RuntimeError):
    """The upstream model call failed; message carries the upstream reason."""


@dataclass
class DiagnosisResult:
    diagnosis: str
    solution: str
    conversation_response: str


@dataclass
class ImageAnalysisResult:
    analysis: str
    recommendations: str
    identified_issues: List[str] = field(default_factory=list)


def build_diagnosis_prompt(
    issue: str,
    appliance_type: Optional[str] = None,
    brand: Optional[str] = None,
    model: Optional[str] = None,
) -> str:
    return (
        f"Appliance: {appliance_type or 'Unknown'}\n"
        f"Brand: {brand or 'Unknown'}\n"
        f"Model: {model or 'Unknown'}\n"
        f"\n"
        f"Issue: {issue}\n"
        f"\n"
        f"Please help diagnose this problem and provide troubleshooting guidance."
    )


def build_image_prompt(appliance_type: Optional[str] = None, user_description: Optional[str] = None) -> str:
    return (
        f"You are an expert appliance repair technician analyzing an image of a "
        f"{appliance_type or 'home appliance'}.\n"
        f"\n"
        f"User's description: {user_description or 'No description provided'}\n"
        f"\n"
        f"Please analyze this image and provide:\n"
        f"1. What you see in the image (error codes, visible damage, parts)\n"
        f"2. Potential issues or problems identified\n"
        f"3. Recommended next steps or solutions\n"
        f"\n"
        f"Be specific and actionable. If you see error codes, explain what they mean."
    )


def extract_identified_issues(text: str) -> List[str]:
    """Naive case-insensitive keyword scan of the model's answer."""
    lowered = (text or "").lower()
    return [label for needle, label in ISSUE_KEYWORDS if needle in lowered]


class AIClient:
    """
    Chat completions over plain REST (httpx), same shape for text and vision.
    """

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.base_url = settings.openai_base_url
        self.timeout = settings.openai_timeout
        self.max_tokens = settings.openai_max_tokens

    def _complete(self, messages: List[Dict], stage: str) -> str:
        if not self.api_key or self.api_key.strip() in {"", "<PUT_YOUR_KEY_HERE>"}:
            raise AIError("OPENAI_API_KEY is not set (or placeholder).")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "max_completion_tokens": self.max_tokens,
        }
        url = f"{self.base_url}/chat/completions"

        with timed_block(stage, model=self.model):
            try:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.post(url, headers=headers, json=payload)
            except httpx.HTTPError as e:
                raise AIError(f"{type(e).__name__}: {e}") from e

            if resp.status_code != 200:
                raise AIError(f"HTTP {resp.status_code}: {resp.text[:500]}")

            try:
                data = resp.json()
                content = data["choices"][0]["message"]["content"]
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise AIError(f"unexpected response format: {e}") from e

        return content or ""

    def diagnose_issue(
        self,
        issue: str,
        appliance_type: Optional[str] = None,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        conversation_history: Optional[List[Dict[str, str]]] = None,
    ) -> DiagnosisResult:
        messages: List[Dict] = [{"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT}]
        for turn in conversation_history or []:
            messages.append({"role": turn["role"], "content": turn["content"]})
        messages.append({
            "role": "user",
            "content": build_diagnosis_prompt(issue, appliance_type, brand, model),
        })

        try:
            text = self._complete(messages, "ai-diagnose")
        except AIError as e:
            raise AIError(f"Failed to get AI diagnosis: {e}") from e

        log.info("diagnosis reply chars=%s history_turns=%s", len(text), len(conversation_history or []))
        return DiagnosisResult(diagnosis=text, solution=text, conversation_response=text)

    def analyze_appliance_image(
        self,
        base64_image: str,
        appliance_type: Optional[str] = None,
        user_description: Optional[str] = None,
    ) -> ImageAnalysisResult:
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_image_prompt(appliance_type, user_description)},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/jpeg;base64,{base64_image}"},
                    },
                ],
            }
        ]

        try:
            text = self._complete(messages, "ai-analyze-image")
        except AIError as e:
            raise AIError(f"Failed to analyze image: {e}") from e

        return ImageAnalysisResult(
            analysis=text,
            recommendations=text,
            identified_issues=extract_identified_issues(text),
        )
