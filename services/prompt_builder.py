from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence


class GenerationMethod(str, Enum):
    brief = "brief"
    raw_idea = "raw_idea"
    draft_optimization = "draft_optimization"
    content_analysis = "content_analysis"


class PromptVariant(str, Enum):
    concise = "concise"
    standard = "standard"
    advanced = "advanced"


class PromptBuildError(ValueError):
    """Raised when a prompt cannot be rendered from the request."""


class InvalidMethod(PromptBuildError):
    """Raised when the generation method is not recognized."""


class MissingRequiredField(PromptBuildError):
    """Raised when a method-mandatory field is absent or empty."""

    def __init__(self, method: GenerationMethod, field: str) -> None:
        super().__init__(f"Missing required field '{field}' for method '{method.value}'.")
        self.method = method
        self.field = field


REQUIRED_FIELDS: dict[GenerationMethod, tuple[str, ...]] = {
    GenerationMethod.brief: ("content_type", "platform", "goal", "topic"),
    GenerationMethod.raw_idea: ("raw_idea",),
    GenerationMethod.draft_optimization: ("draft_headline",),
    GenerationMethod.content_analysis: ("content_piece",),
}

HOOK_COUNTS: dict[PromptVariant, int] = {
    PromptVariant.concise: 5,
    PromptVariant.standard: 10,
    PromptVariant.advanced: 10,
}


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


CONCISE_SYSTEM_PROMPT = """
You are an expert copywriter and marketing strategist specializing in creating compelling hooks and headlines that drive engagement and conversions. You understand the psychology of attention, the mechanics of viral content, and platform-specific best practices.

Your hooks should be:
- Attention-grabbing and curiosity-inducing
- Platform-appropriate and audience-specific
- Psychologically compelling (using proven triggers like loss aversion, social proof, urgency, etc.)
- Diverse in style and approach
- Professional yet engaging

Generate exactly 5 unique hooks/headlines. Each should be distinctly different in approach and style. Return only the hooks as a numbered list (1. 2. 3. 4. 5.), one per line, with no additional commentary.
""".strip()

STANDARD_SYSTEM_PROMPT = (
    "You are an expert copywriter specializing in creating compelling hooks and headlines "
    "that convert. Generate exactly 10 numbered hooks/headlines based on the user input."
)

ADVANCED_SYSTEM_PROMPT = """
You are an expert copywriter with deep knowledge of psychological frameworks and advanced hook techniques. You specialize in creating hooks that leverage:

PSYCHOLOGICAL FOUNDATIONS:
- Pattern Recognition and Interruption
- Information Gap Theory and Curiosity Triggers
- Cognitive Dissonance Creation
- Status Threat/Opportunity Recognition
- Loss Aversion and Prospect Theory
- Social Proof Mechanisms
- Authority Influence and Scarcity Response

FRAME COMBINATION STRATEGIES:
- Primary + Supporting Frame Structure
- Triple Frame Layering for complex impact
- Information-Gap + Social Proof combinations
- Warning + Case Study pairings
- Insider Confession + Taboo Solution merging

HOOK FRAMEWORKS TO UTILIZE:
1. Information-Gap + Social Proof: "The [hidden strategy/secret] that [authority figures] never share publicly"
2. Warning + Future Event: "Why [current situation] may be at risk when [known future event] happens"
3. Taboo Solution + Case Study: "Why I told [someone] to [controversial action]: A revealing case study"
4. System/Strategy + Timeline: "The [framework/method]: How to [achieve result] in [specific timeframe]"
5. Insider Confession + Secret Society: "Confessions of a former [insider]: The [methods] [elite group] use internally"
6. New Discovery + Authority Challenge: "New [research/discovery] proves [established authority] wrong about [topic]"
7. Contrarian Position + Success Story: "[Surprising approach] that [achieved remarkable result]"
8. Method Reveal + Social Validation: "How [relatable person] [achieved goal] using [unconventional method]"

INDUSTRY-SPECIFIC APPLICATIONS:
- Finance: Focus on risk, opportunity, insider knowledge, market secrets
- Health: Emphasize discovery, transformation, authority challenges, hidden dangers
- Business: Highlight growth, efficiency, competitive advantage, insider strategies
- Education: Stress learning breakthroughs, skill acceleration, knowledge gaps
- Coaching: Feature transformation, breakthrough moments, mindset shifts

Generate 10 numbered hooks that:
1. Use advanced psychological frameworks
2. Combine multiple frames for enhanced impact
3. Are specific to the industry/context provided
4. Include concrete details and numbers when possible
5. Create strong curiosity gaps and emotional engagement
6. Avoid generic language and cliched phrases
7. Demonstrate deep understanding of target audience psychology
""".strip()

SYSTEM_PROMPTS: dict[PromptVariant, str] = {
    PromptVariant.concise: CONCISE_SYSTEM_PROMPT,
    PromptVariant.standard: STANDARD_SYSTEM_PROMPT,
    PromptVariant.advanced: ADVANCED_SYSTEM_PROMPT,
}

CONCISE_TEMPLATES: dict[GenerationMethod, str] = {
    GenerationMethod.brief: """
Create 5 compelling hooks/headlines for:
- Content Type: {content_type}
- Platform: {platform}
- Goal: {goal}
- Topic: {topic}

Focus on {platform} best practices and make each hook unique in style (question, statement, number, controversy, story, etc.).
""",
    GenerationMethod.raw_idea: """
Transform this raw idea into 5 polished, compelling hooks/headlines:

Raw idea: "{raw_idea}"

Make each hook approach the idea from a different angle (controversial, educational, story-driven, problem/solution, emotional, etc.).
""",
    GenerationMethod.draft_optimization: """
Optimize and create 5 improved versions of this headline/hook:

Original: "{draft_headline}"

Use different psychological triggers, improve clarity, add urgency/curiosity, and make each version distinctly different while maintaining the core message.
""",
    GenerationMethod.content_analysis: """
Analyze this content and create 5 compelling hooks/headlines that could be used to promote it:

Content: "{content_piece}"

Extract key insights, benefits, or intriguing elements and craft hooks that would make people want to engage with this content.
""",
}

STANDARD_TEMPLATES: dict[GenerationMethod, str] = {
    GenerationMethod.brief: """
Content Type: {content_type}
Platform: {platform}
Goal: {goal}
Topic: {topic}

Create hooks that are attention-grabbing, specific to the platform, and aligned with the goal.
""",
    GenerationMethod.raw_idea: """
Raw Idea: {raw_idea}
{optional}
Transform this raw idea into polished, compelling hooks that capture the essence while adding structure and emotional appeal.
""",
    GenerationMethod.draft_optimization: """
Current Draft: {draft_headline}
{optional}
Optimize and enhance this headline using proven copywriting techniques, emotional triggers, and curiosity gaps.
""",
    GenerationMethod.content_analysis: """
Content Piece: {content_piece}
{optional}
Analyze this content and create hooks that highlight the most compelling insights and draw readers in.
""",
}

ADVANCED_TEMPLATES: dict[GenerationMethod, str] = {
    GenerationMethod.brief: """
BRIEF ANALYSIS:
Content Type: {content_type}
Platform: {platform}
Goal: {goal}
Topic: {topic}

INSTRUCTIONS:
- Apply industry-specific psychological frameworks
- Use platform-appropriate frame combinations
- Align with the stated goal using proven triggers
- Include specific details and authority references
- Create strong information gaps and curiosity
- Use numbers, timelines, and concrete examples

FRAMEWORK APPLICATION:
Select the most effective combination of frames for this {platform} {content_type} about {topic} designed to {goal}.
""",
    GenerationMethod.raw_idea: """
RAW IDEA TRANSFORMATION:
Original Idea: "{raw_idea}"
{optional}
INSTRUCTIONS:
- Transform this raw concept using advanced psychological frameworks
- Apply frame combination strategies to enhance impact
- Create cognitive dissonance and curiosity gaps
- Use authority positioning and social proof elements
- Incorporate specific details and concrete examples
- Layer multiple psychological triggers for maximum engagement

FRAMEWORK SELECTION:
Choose frames that best serve the core message while adding psychological sophistication and emotional triggers.
""",
    GenerationMethod.draft_optimization: """
DRAFT OPTIMIZATION ANALYSIS:
Current Draft: "{draft_headline}"
{optional}
INSTRUCTIONS:
- Analyze the current draft for psychological weaknesses
- Apply advanced frame combinations to strengthen impact
- Address identified issues using proven psychological principles
- Enhance with authority positioning, social proof, or scarcity
- Create stronger information gaps and emotional engagement
- Use specific numbers, timelines, and concrete details

OPTIMIZATION STRATEGY:
Transform the existing hook using sophisticated psychological frameworks while maintaining the core message integrity.
""",
    GenerationMethod.content_analysis: """
CONTENT ANALYSIS FOR HOOK EXTRACTION:
Content Piece: "{content_piece}"
{optional}
INSTRUCTIONS:
- Analyze the content for key insights and emotional triggers
- Extract the most compelling psychological elements
- Apply advanced frame combinations to highlight key points
- Create hooks that draw readers into the full content
- Use authority positioning and social proof where relevant
- Incorporate specific details and concrete examples from the content

EXTRACTION STRATEGY:
Identify the strongest psychological elements in the content and transform them into sophisticated hooks using proven frameworks.
""",
}

TEMPLATES: dict[PromptVariant, dict[GenerationMethod, str]] = {
    PromptVariant.concise: CONCISE_TEMPLATES,
    PromptVariant.standard: STANDARD_TEMPLATES,
    PromptVariant.advanced: ADVANCED_TEMPLATES,
}

HEADERS: dict[PromptVariant, str] = {
    PromptVariant.concise: "",
    PromptVariant.standard: "Generate 10 compelling hooks and headlines for:\n\n",
    PromptVariant.advanced: "Generate 10 advanced psychological hooks using the frameworks above for:\n\n",
}

FOOTERS: dict[PromptVariant, str] = {
    PromptVariant.concise: "\n\nFormat each hook on its own line, numbered 1-5.",
    PromptVariant.standard: (
        "\n\nReturn exactly 10 numbered hooks (1. 2. 3. etc.) that are:\n"
        "- Attention-grabbing\n- Curiosity-inducing\n- Specific and actionable\n"
        "- Optimized for engagement"
    ),
    PromptVariant.advanced: """

FRAMEWORK REQUIREMENTS:
1. Use at least 3 different frame combinations across the 10 hooks
2. Include specific numbers, percentages, or timelines where appropriate
3. Incorporate authority figures, insider perspectives, or social proof
4. Create strong curiosity gaps and information deficits
5. Apply industry-appropriate psychological triggers
6. Avoid generic language - be specific and concrete
7. Layer multiple psychological principles for maximum impact

Return exactly 10 numbered hooks (numbered 1-10) that demonstrate mastery of advanced copywriting psychology.""",
}

# (field, standard label, advanced label) per method, in render order.
OPTIONAL_FIELDS: dict[GenerationMethod, tuple[tuple[str, str, str], ...]] = {
    GenerationMethod.brief: (
        ("audience", "Target Audience", "Target Audience"),
        ("tone", "Tone", "Desired Tone"),
    ),
    GenerationMethod.raw_idea: (
        ("audience", "Target Audience", "Target Audience"),
        ("tone", "Tone", "Desired Tone"),
    ),
    GenerationMethod.draft_optimization: (
        ("issues", "Issues to Fix", "Issues to Address"),
        ("optimization_goal", "Goal", "Optimization Goal"),
        ("format", "Content Format", "Content Format"),
    ),
    GenerationMethod.content_analysis: (
        ("content_format", "Content Type", "Content Type"),
        ("styles", "Preferred Styles", "Preferred Styles"),
    ),
}


def parse_method(value: GenerationMethod | str | None) -> GenerationMethod:
    if isinstance(value, GenerationMethod):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidMethod("Invalid or missing method.")
    try:
        return GenerationMethod(value.strip().lower().replace("-", "_"))
    except ValueError as exc:
        raise InvalidMethod(f"Invalid generation method: {value!r}.") from exc


def _field_text(value: str | Sequence[str] | None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return ", ".join(item.strip() for item in value if item and item.strip())


def _render_optional(
    method: GenerationMethod,
    fields: Mapping[str, str | Sequence[str]],
    variant: PromptVariant,
) -> str:
    lines = []
    for name, label, advanced_label in OPTIONAL_FIELDS[method]:
        value = _field_text(fields.get(name))
        if value:
            lines.append(f"{advanced_label if variant is PromptVariant.advanced else label}: {value}")
    return "\n".join(lines) + "\n" if lines else ""


def build_prompt(
    method: GenerationMethod | str,
    fields: Mapping[str, str | Sequence[str]],
    variant: PromptVariant = PromptVariant.standard,
) -> Prompt:
    """Render the system and user prompt for one generation request.

    ``fields`` must already be sanitized; values are embedded verbatim.
    """
    resolved = parse_method(method)
    values: dict[str, str] = {}
    for name in REQUIRED_FIELDS[resolved]:
        value = _field_text(fields.get(name))
        if not value:
            raise MissingRequiredField(resolved, name)
        values[name] = value

    optional = _render_optional(resolved, fields, variant)
    body = TEMPLATES[variant][resolved].strip("\n").format(optional=optional, **values)
    if optional and "{optional}" not in TEMPLATES[variant][resolved]:
        body = f"{body}\n\n{optional.rstrip()}"

    return Prompt(
        system=SYSTEM_PROMPTS[variant],
        user=f"{HEADERS[variant]}{body}{FOOTERS[variant]}",
    )
