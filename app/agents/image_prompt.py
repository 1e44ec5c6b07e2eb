"""Prompt Composer: turn platform, style and the user's idea into one image prompt."""
from app.workflow.state import ImageWorkflowState

DEFAULT_STYLE = "Professional, high-quality, modern."


def compose_image_prompt(platform: str, prompt: str, style: str | None = None) -> str:
    style_line = f"Style: {style.strip()}." if style and style.strip() else f"Style: {DEFAULT_STYLE}"
    return f"""Create a social media image for {platform}.
{style_line}
Image details: {prompt}

Requirements:
- Ensure the image is visually appealing and social media-ready
- Maintain brand-safe content
- Optimize for {platform} viewing
- Create clear focal points
- Use appropriate color harmony
"""


async def image_prompt_agent(state: ImageWorkflowState) -> dict:
    return {
        "composed_prompt": compose_image_prompt(
            state.get("platform") or "social media",
            state.get("prompt") or "",
            state.get("style"),
        )
    }
