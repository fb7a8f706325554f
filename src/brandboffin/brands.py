"""Brand name generation with Claude or any Bedrock chat model.

Prompt building and output parsing are pure functions; the clients only
add credentials and the model call.
"""

import asyncio
import json
import logging
import re
from enum import Enum
from typing import List, Optional

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError

from brandboffin import config
from brandboffin.errors import upstream_error
from brandboffin.models import BrandNameRequest, BrandNameSuggestion

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are 'BrandSpark', a world-class AI branding assistant. Your expertise lies in crafting "
    "unique brand names and impactful taglines. You are highly creative, pay close attention to "
    "user requirements, and strictly adhere to the requested output format."
)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_BLANK_LINE_RE = re.compile(r"\n\s*\n")


class OutputFormat(str, Enum):
    PAIRS = "pairs"
    JSON = "json"


class SuggestionParseError(ValueError):
    """Model output could not be read in the requested format."""


# ==================== PROMPT ====================
def build_brand_prompt(request: BrandNameRequest, output_format: OutputFormat = OutputFormat.JSON) -> str:
    count = request.count
    if output_format == OutputFormat.JSON:
        goal = f"{count} unique and creative brand name, tagline, and domain suggestion sets"
    else:
        goal = f"{count} unique and creative brand name and tagline pairs"

    prompt = (
        f"Your goal is to generate {goal}.\n\n"
        "Consider the following criteria carefully:\n"
        f"- Core Idea/Description: {request.prompt}\n"
    )
    if request.industry:
        prompt += f"- Industry: {request.industry}\n"
    if request.style:
        prompt += f"- Desired Style/Vibe: {request.style}\n"
    if request.keywords:
        prompt += f"- Key Themes/Keywords to incorporate or allude to: {', '.join(request.keywords)}\n"
    if request.length:
        prompt += (
            f"- Target Brand Name Length: Approximately {request.length} characters. "
            "Shorter is often better if it's impactful.\n"
        )

    if output_format == OutputFormat.JSON:
        prompt += f"""
For each of the {count} suggestions, provide:
1.  Brand Name: Memorable, distinct, easy to spell and pronounce, relevant to the core idea and style. Differentiated if an industry is provided.
2.  Tagline: Concise (3-7 words), compelling, capturing the brand's essence, complementing the brand name.
3.  Suggested Domains: An array of 3-5 relevant domain name suggestions (e.g., brandname.com, getbrandname.io, brandname.ai). Include a mix of common and creative TLDs. Only include valid and relevant TLDs.

Output Format:
VERY IMPORTANT: Provide the entire response as a single, valid JSON array. Each element in the array should be an object with the following keys: "name" (string), "tagline" (string), and "suggestedDomains" (array of strings). Do not include any text outside of this JSON array.
"""
    else:
        prompt += f"""
For each of the {count} suggestions:
1.  Brand Name: Should be memorable, distinct, easy to spell, and easy to pronounce. It should be relevant to the core idea and style.
2.  Tagline: Should be concise (ideally 3-7 words), compelling, and capture the brand's essence. It must complement the brand name.

Output Format:
Each pair MUST be formatted exactly as follows, with 'Brand Name:' and 'Tagline:' on separate lines, followed by a blank line before the next pair. Do not include any numbering, introductory/concluding text, or any other explanations.

Brand Name: [The Brand Name]
Tagline: [The Tagline]

Brand Name: [Another Brand Name]
Tagline: [Another Tagline]
"""
    return prompt


# ==================== PARSERS ====================
def parse_delimited_pairs(text: str) -> List[BrandNameSuggestion]:
    """Read `Brand Name:` / `Tagline:` blocks separated by blank lines."""
    suggestions = []
    for block in _BLANK_LINE_RE.split(text.strip()):
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if len(lines) < 2:
            continue
        name = next((l[len("Brand Name:"):].strip() for l in lines if l.startswith("Brand Name:")), "")
        tagline = next((l[len("Tagline:"):].strip() for l in lines if l.startswith("Tagline:")), "")
        if name and tagline:
            suggestions.append(BrandNameSuggestion(name=name, tagline=tagline))
    return suggestions


def _is_valid_suggestion(item) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("name"), str)
        and isinstance(item.get("tagline"), str)
        and isinstance(item.get("suggestedDomains"), list)
        and all(isinstance(d, str) for d in item["suggestedDomains"])
    )


def parse_json_suggestions(text: str) -> List[BrandNameSuggestion]:
    """Read a JSON array of {name, tagline, suggestedDomains}.

    Elements with the wrong shape are dropped. Raises SuggestionParseError
    when the output is not a JSON array at all.
    """
    stripped = text.strip()
    fenced = _CODE_FENCE_RE.match(stripped)
    if fenced:
        stripped = fenced.group(1)

    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise SuggestionParseError(f"Model output is not valid JSON: {e}") from e
    if not isinstance(parsed, list):
        raise SuggestionParseError("Model output was not a JSON array")

    return [
        BrandNameSuggestion(
            name=item["name"],
            tagline=item["tagline"],
            suggested_domains=item["suggestedDomains"],
        )
        for item in parsed
        if _is_valid_suggestion(item)
    ]


def parse_suggestions(text: str, output_format: OutputFormat) -> List[BrandNameSuggestion]:
    if output_format == OutputFormat.JSON:
        return parse_json_suggestions(text)
    return parse_delimited_pairs(text)


# ==================== CLIENTS ====================
class BrandNameClient:
    """Base for generative model backends.

    Subclasses implement `_complete(prompt) -> text`; prompt building,
    parsing and truncation are shared.
    """

    def __init__(self, name: str, output_format: Optional[OutputFormat] = None):
        self.name = name
        self.output_format = OutputFormat(output_format or config.BRAND_OUTPUT_FORMAT.lower())

    async def _complete(self, prompt: str) -> str:
        raise NotImplementedError

    async def suggest(self, request: BrandNameRequest) -> List[BrandNameSuggestion]:
        prompt = build_brand_prompt(request, self.output_format)
        logger.debug(f"Brand prompt:\n{prompt}")

        text = await self._complete(prompt)

        try:
            suggestions = parse_suggestions(text, self.output_format)
        except SuggestionParseError as e:
            logger.error(f"{self.name}: {e}. Output: {text[:500]}")
            return []

        return suggestions[: request.count]

    async def aclose(self):
        pass


class AnthropicBrandClient(BrandNameClient):
    """Claude through the Anthropic Messages API, keyed by env or Secrets Manager."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_name: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        secrets_client=None,
        model: Optional[str] = None,
        temperature: float = config.MODEL_TEMPERATURE,
        max_tokens: int = config.MODEL_MAX_TOKENS,
        output_format: Optional[OutputFormat] = None,
        api_url: str = config.ANTHROPIC_API_URL,
    ):
        super().__init__("anthropic", output_format)
        self._api_key = api_key or config.ANTHROPIC_API_KEY or None
        self.secret_name = secret_name or config.MODEL_SECRET_NAME or None
        self._http = http_client
        self._secrets = secrets_client
        self.model = model or config.MODEL_ID
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_url = api_url

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(config.REQUEST_TIMEOUT_SECONDS))
        return self._http

    def _read_secret(self) -> str:
        if self._secrets is None:
            self._secrets = boto3.client("secretsmanager", region_name=config.AWS_REGION)
        data = self._secrets.get_secret_value(SecretId=self.secret_name)
        secret_string = data.get("SecretString")
        if not secret_string:
            raise ValueError("API key not found in secret string (SecretString is empty).")
        secret = json.loads(secret_string)
        api_key = secret.get("apiKey") if isinstance(secret, dict) else None
        if not isinstance(api_key, str) or not api_key:
            raise ValueError("'apiKey' field not found or not a string in secret JSON.")
        return api_key

    async def get_api_key(self) -> str:
        """Resolve the API key once: explicit value, then the configured secret."""
        if self._api_key:
            return self._api_key
        if not self.secret_name:
            logger.error("Neither ANTHROPIC_API_KEY nor MODEL_SECRET_NAME is set")
            raise upstream_error("Server configuration error: model API key is not configured.")

        logger.info(f"Retrieving model API key from secret {self.secret_name}")
        try:
            self._api_key = await asyncio.to_thread(self._read_secret)
        except (ClientError, BotoCoreError, ValueError) as e:
            logger.error(f"Error retrieving API key '{self.secret_name}': {e}")
            raise upstream_error(f"Could not retrieve API key for secret '{self.secret_name}'.")
        return self._api_key

    async def _complete(self, prompt: str) -> str:
        api_key = await self.get_api_key()
        try:
            response = await self.http.post(
                self.api_url,
                json={
                    "model": self.model,
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                    "system": SYSTEM_PROMPT,
                    "messages": [{"role": "user", "content": prompt}],
                },
                headers={
                    "x-api-key": api_key,
                    "anthropic-version": config.ANTHROPIC_VERSION,
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Error calling model API: {e!r}")
            raise upstream_error("Failed to generate brand name suggestions")

        if response.status_code != 200:
            logger.error(f"Model API error {response.status_code}: {response.text[:500]}")
            raise upstream_error("Failed to generate brand name suggestions")

        try:
            content = response.json().get("content") or []
        except ValueError:
            logger.error("Model API returned a non-JSON body")
            raise upstream_error("Failed to generate brand name suggestions")

        return next(
            (block.get("text", "") for block in content if block.get("type") == "text"),
            "",
        ).strip()

    async def aclose(self):
        if self._http is not None:
            await self._http.aclose()


class BedrockBrandClient(BrandNameClient):
    """Any Bedrock chat model through the Converse API, using the ambient AWS credentials."""

    def __init__(
        self,
        bedrock_client=None,
        model: Optional[str] = None,
        temperature: float = config.MODEL_TEMPERATURE,
        max_tokens: int = config.MODEL_MAX_TOKENS,
        top_p: float = config.MODEL_TOP_P,
        output_format: Optional[OutputFormat] = None,
    ):
        super().__init__("bedrock", output_format)
        self.client = bedrock_client or boto3.client("bedrock-runtime", region_name=config.AWS_REGION)
        self.model = model or config.MODEL_ID
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p

    async def _complete(self, prompt: str) -> str:
        try:
            response = await asyncio.to_thread(
                self.client.converse,
                modelId=self.model,
                system=[{"text": SYSTEM_PROMPT}],
                messages=[{"role": "user", "content": [{"text": prompt}]}],
                inferenceConfig={
                    "maxTokens": self.max_tokens,
                    "temperature": self.temperature,
                    "topP": self.top_p,
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error calling Bedrock model {self.model}: {e}")
            raise upstream_error("Failed to generate brand name suggestions")

        logger.info(f"Bedrock response received, stop reason: {response.get('stopReason')}")
        content = response.get("output", {}).get("message", {}).get("content") or []
        return next(
            (block["text"] for block in content if isinstance(block.get("text"), str)),
            "",
        ).strip()


def create_brand_client(provider: Optional[str] = None) -> BrandNameClient:
    """Build the backend named by `provider` (default: MODEL_PROVIDER)."""
    provider = (provider or config.MODEL_PROVIDER).lower()
    if provider == "bedrock":
        return BedrockBrandClient()
    if provider == "anthropic":
        return AnthropicBrandClient()
    raise ValueError(f"Unknown model provider '{provider}', expected 'bedrock' or 'anthropic'")
