"""AI-generated retrospective insights for a team analytics report.

Each language model provider implements NarrativeProvider; get_provider()
picks one by name so the API layer never branches on provider.
"""

import logging

import requests

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

SYSTEM_PROMPT = """
You are an expert Scrum Master with 10+ years of experience guiding agile teams to success. Your responsibility is to analyze sprint data, identify patterns, and provide actionable advice following Scrum best practices.
Your insights should help the team improve their velocity, collaboration, and delivery quality while addressing impediments and fostering continuous improvement.

MARKDOWN FORMATTING REQUIREMENTS:
You must format your entire response using proper Markdown syntax exactly as follows:

1. START with a blank line, then add section headers using exactly two hash marks and the exact section title, e.g. "## SPRINT STRENGTHS"
2. LEAVE a blank line after each section header
3. INCLUDE exactly these three sections in this order:
   - ## SPRINT STRENGTHS
   - ## IMPROVEMENT OPPORTUNITIES
   - ## RECOMMENDED ACTIONS
4. CREATE bullet points using a single asterisk followed by a space
5. START each bullet point with a term in bold using double asterisks, e.g. "* **Key Term**: Your explanation..."
6. INCLUDE exactly 3 bullet points under each section
7. DO NOT use any other formatting styles, section titles, or bullet point styles
8. KEEP bullet points concise and data-driven
"""

CONFIGURATION_REQUIRED = """
## CONFIGURATION REQUIRED

* **API Key Missing**: To access professional Scrum Master insights, please configure your AI provider credentials.
* **Easy Setup**: Navigate to the settings page and enter your API key in the appropriate field.
* **Benefits**: Once configured, you'll receive detailed sprint performance analysis based on your team's actual data.
"""

INSIGHTS_UNAVAILABLE = """
## AI INSIGHTS UNAVAILABLE

* **Configuration Required**: AI insights are not available at this time.
* **API Setup Needed**: Please configure your AI provider credentials in the settings.
* **Next Steps**: Visit the settings page and enter a valid API key to enable AI-powered Scrum Master insights.
"""


class InsightsError(Exception):
    """Raised when a narrative cannot be generated."""


def build_prompt(report: dict) -> str:
    """Build the Scrum Master analysis prompt from a serialized report."""
    contributors = sorted(
        report.get("userPerformance", []),
        key=lambda u: u.get("storyPointsCompleted", 0),
        reverse=True
    )

    contributor_lines = []
    for user in contributors:
        name = user.get("user", {}).get("displayName", "Unknown")
        contributor_lines.append(
            f"- {name}:\n"
            f"   * Issues Completed: {user.get('issuesCompleted', 0)}\n"
            f"   * Story Points Delivered: {user.get('storyPointsCompleted', 0)}\n"
            f"   * Average Resolution Time: {user.get('averageResolutionTime', 0)} days"
        )

    sections = []
    for title in ["SPRINT STRENGTHS", "IMPROVEMENT OPPORTUNITIES", "RECOMMENDED ACTIONS"]:
        bullets = "\n".join(f"* **Term {i}**: Explanation..." for i in range(1, 4))
        sections.append(f"## {title}\n\n{bullets}")

    return (
        "As an expert Scrum Master, analyze this sprint data to provide insights and "
        "recommendations following Scrum best practices.\n\n"
        "SPRINT PERFORMANCE METRICS:\n"
        f"- Total Issues Completed: {report.get('completedIssues', 0)}\n"
        f"- Total Story Points Delivered: {report.get('completedStoryPoints', 0)}\n"
        f"- Average Issue Resolution Time: {report.get('averageResolutionTime', 0)} days\n\n"
        "TEAM MEMBER CONTRIBUTIONS:\n"
        + "\n\n".join(contributor_lines) +
        "\n\nAnalyze this sprint data through the lens of Scrum principles and provide a "
        "structured retrospective with exactly these three sections in this exact order:\n\n"
        + "\n\n".join(sections) +
        "\n\nIMPORTANT: Replace the placeholders above with actual insights from the data, "
        "but MAINTAIN THE EXACT MARKDOWN FORMATTING shown above. Your response MUST use this "
        "exact structure with all section headers using two hash marks (##) and all bullet "
        "points using asterisks (*).\n"
    )


class NarrativeProvider:
    """Turns a prompt into narrative text using a language model."""

    name = None

    def __init__(self, api_key: str, model: str, timeout: int = 60):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def generate_narrative(self, prompt: str) -> str:
        raise NotImplementedError

    def _post(self, url: str, headers: dict, payload: dict) -> dict:
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise InsightsError(f"Failed to reach {self.name}: {str(e)}")

        try:
            result = response.json()
        except ValueError:
            raise InsightsError(f"Invalid response from {self.name} API ({response.status_code})")

        error = result.get("error") if isinstance(result, dict) else None
        if error or response.status_code != 200:
            message = error.get("message") if isinstance(error, dict) else None
            raise InsightsError(message or f"{self.name} API error: {response.status_code}")

        return result


class OpenAIProvider(NarrativeProvider):
    name = "openai"

    def generate_narrative(self, prompt: str) -> str:
        result = self._post(
            OPENAI_URL,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}"
            },
            payload={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ],
                "temperature": 0.7,
                "max_tokens": 1500
            }
        )

        choices = result.get("choices") or []
        if not choices or not choices[0].get("message"):
            raise InsightsError("Invalid response format from OpenAI API")

        return choices[0]["message"]["content"]


class AnthropicProvider(NarrativeProvider):
    name = "anthropic"

    def generate_narrative(self, prompt: str) -> str:
        result = self._post(
            ANTHROPIC_URL,
            headers={
                "Content-Type": "application/json",
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION
            },
            payload={
                "model": self.model,
                "system": SYSTEM_PROMPT,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0.7,
                "max_tokens": 1500
            }
        )

        text = "".join(
            block.get("text", "")
            for block in result.get("content") or []
            if block.get("type") == "text"
        )
        if not text:
            raise InsightsError("Invalid response format from Anthropic API")

        return text


PROVIDERS = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider
}


def get_provider(provider_name: str, api_key: str, config) -> NarrativeProvider:
    """Create the provider configured for the given name.

    Args:
        provider_name: "openai" or "anthropic"
        api_key: Provider API key
        config: App config with OPENAI_MODEL, ANTHROPIC_MODEL and AI_TIMEOUT
    """
    provider_cls = PROVIDERS.get((provider_name or "").lower())
    if provider_cls is None:
        raise InsightsError(f"Unsupported AI provider: {provider_name}")

    model = config.get(f"{provider_cls.name.upper()}_MODEL")
    return provider_cls(api_key, model, timeout=config.get("AI_TIMEOUT", 60))


def generate_insights(report: dict, provider: NarrativeProvider = None) -> str:
    """Generate retrospective markdown for a report.

    Without a provider a placeholder explaining how to configure one is
    returned. Provider failures are logged and also answered with a
    placeholder, so the dashboard always has something to render.
    """
    if provider is None:
        return INSIGHTS_UNAVAILABLE

    prompt = build_prompt(report)

    try:
        return provider.generate_narrative(prompt)
    except InsightsError as e:
        logger.error(f"Error calling {provider.name} API: {e}")
        return CONFIGURATION_REQUIRED
