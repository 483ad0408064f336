from __future__ import annotations

import pytest

from services.prompt_builder import (
    REQUIRED_FIELDS,
    GenerationMethod,
    InvalidMethod,
    MissingRequiredField,
    PromptVariant,
    build_prompt,
    parse_method,
)

MINIMAL_FIELDS = {
    GenerationMethod.brief: {
        "content_type": "newsletter",
        "platform": "Instagram",
        "goal": "grow followers",
        "topic": "meal prep for busy parents",
    },
    GenerationMethod.raw_idea: {"raw_idea": "most productivity apps make people slower"},
    GenerationMethod.draft_optimization: {"draft_headline": "How we cut churn in half"},
    GenerationMethod.content_analysis: {"content_piece": "A long essay about pricing experiments."},
}


@pytest.mark.parametrize("variant", list(PromptVariant))
@pytest.mark.parametrize("method", list(GenerationMethod))
def test_prompt_contains_every_required_value(method, variant):
    prompt = build_prompt(method, MINIMAL_FIELDS[method], variant)

    assert prompt.system
    assert prompt.user
    for name in REQUIRED_FIELDS[method]:
        assert MINIMAL_FIELDS[method][name] in prompt.user


def test_hook_count_follows_variant():
    fields = MINIMAL_FIELDS[GenerationMethod.raw_idea]

    assert "5 polished" in build_prompt("raw_idea", fields, PromptVariant.concise).user
    assert "exactly 10 numbered hooks" in build_prompt("raw_idea", fields, PromptVariant.standard).user
    assert "numbered 1-10" in build_prompt("raw_idea", fields, PromptVariant.advanced).user


def test_optional_fields_only_rendered_when_present():
    fields = {"raw_idea": "cold email is not dead", "audience": "SaaS founders", "tone": ""}

    prompt = build_prompt(GenerationMethod.raw_idea, fields)

    assert "Target Audience: SaaS founders" in prompt.user
    assert "Tone:" not in prompt.user


def test_styles_list_is_joined():
    fields = {"content_piece": "Case study text", "styles": ["question", "contrarian"]}

    prompt = build_prompt(GenerationMethod.content_analysis, fields, PromptVariant.advanced)

    assert "Preferred Styles: question, contrarian" in prompt.user


def test_optional_fields_appended_for_concise_templates():
    fields = {"draft_headline": "Our new feature", "issues": "too vague"}

    prompt = build_prompt(GenerationMethod.draft_optimization, fields, PromptVariant.concise)

    assert prompt.user.rstrip().endswith("numbered 1-5.")
    assert "Issues to Fix: too vague" in prompt.user


def test_field_values_with_braces_are_not_reformatted():
    fields = dict(MINIMAL_FIELDS[GenerationMethod.brief], topic="templating with {platform}")

    prompt = build_prompt(GenerationMethod.brief, fields)

    assert "Topic: templating with {platform}" in prompt.user


def test_missing_required_field_raises():
    fields = dict(MINIMAL_FIELDS[GenerationMethod.brief])
    fields["goal"] = "   "

    with pytest.raises(MissingRequiredField) as excinfo:
        build_prompt(GenerationMethod.brief, fields)

    assert excinfo.value.field == "goal"


@pytest.mark.parametrize("value", ["", None, "summarize", "brief2"])
def test_invalid_method_raises(value):
    with pytest.raises(InvalidMethod):
        build_prompt(value, {})


@pytest.mark.parametrize("value", ["raw-idea", "RAW_IDEA", " raw_idea "])
def test_parse_method_accepts_legacy_spellings(value):
    assert parse_method(value) is GenerationMethod.raw_idea
