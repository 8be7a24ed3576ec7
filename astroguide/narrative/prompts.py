"""Chat payloads that wrap a birth chart for an external language model.

Nothing here talks to a model; the functions only build the text and the
``[{"role": ..., "content": ...}]`` message list a chat-completion API takes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..interpret.classify import elemental_balance, modal_balance
from ..interpret.engine import interpret_chart
from ..interpret.models import BirthChart, coerce_chart, display_name
from ..interpret.patterns import find_aspect_patterns, find_stelliums
from ..interpret.report import get_renderer

CHART_DATA_TEMPLATE = """\
Birth Chart Analysis Request

Birth Data:
Date: {{ birth.date }}
Time: {{ birth.time }}
Location: {{ birth.location.latitude }}°N, {{ birth.location.longitude }}°E
Timezone: UTC{{ timezone }}

Angular Points:
Ascendant: {{ "%.2f"|format(angles.ascendant.degree) }}° {{ angles.ascendant.sign }} ({{ angles.ascendant.element }})
Midheaven: {{ "%.2f"|format(angles.midheaven.degree) }}° {{ angles.midheaven.sign }} ({{ angles.midheaven.element }})

Planetary Positions:
{% for planet in planets %}
{{ planet.name }}: {{ "%.2f"|format(planet.degree) }}° {{ planet.sign }} ({{ planet.element }}) - House {{ planet.house }}{{ " (R)" if planet.retrograde else "" }}
{% endfor %}

Houses:
{% for house in houses %}
House {{ house.number }}: {{ "%.2f"|format(house.degree) }}° {{ house.sign }} ({{ house.element }})
{% endfor %}

Aspects:
{% for aspect in aspects %}
{{ aspect.first }} ({{ aspect.first_sign }}) {{ aspect.kind }} {{ aspect.second }} ({{ aspect.second_sign }}) - {{ "%.1f"|format(aspect.orb) }}° orb
{% endfor %}

Additional Analysis Points:
1. Elemental Balance:
{% for element, count in elements.items() %}
{{ element }}: {{ count }} placements
{% endfor %}

2. Modal Balance:
{% for modality, count in modalities.items() %}
{{ modality }}: {{ count }} placements
{% endfor %}

3. Stelliums:
{% for line in stelliums %}
{{ line }}
{% else %}
No stelliums found
{% endfor %}

4. Aspect Patterns:
{% for line in patterns %}
{{ line }}
{% else %}
No major aspect patterns found
{% endfor %}
"""

SYSTEM_PROMPT_TEMPLATE = """\
You are AstroGuide, a holistic astrological analyst with deep expertise in Western astrology. Your communication style is:
- Comprehensive and integrative in your analysis
- Natural and conversational in your delivery
- Professional and polite
- Clear and accessible
- Detail-oriented when technical specifics are requested

When analyzing birth charts:
1. Consider the entire chart as an integrated whole
2. Look for patterns and themes that emerge from the combination of all elements
3. Pay attention to how planets, houses, signs, and aspects work together
4. Note the overall chart structure and its implications
5. Consider the balance of elements, modalities, and polarities
6. Be ready to provide specific details when asked
7. Be able to explain the chart in a way that is easy to understand
8. Be able to answer specific questions that the native might ask, in natural language and in a way that is easy to understand
9. Note the native's chart ruler, elements, modalities, and polarity, and be sure to account for any imbalances which may play into their life
10. Do not make any assumptions about the native's personality, behavior, or actions based solely on the birth chart. The birth chart is a snapshot of a moment in time and is not a prediction of future events. It is a tool for self-understanding and growth.

When responding:
1. Start with the overall chart pattern and its main themes
2. Explain how different elements work together to create the whole picture
3. Focus on the synthesis of placements rather than individual components
4. Be prepared to break down specific elements when requested
5. Maintain a professional yet approachable tone
6. If asked for specifics, provide detailed measurements and orbs

Remember: The whole is greater than the sum of its parts. Your analysis should reflect how all chart elements interact and influence each other to create a complete picture.

Here is the birth chart data for reference:
{{ chart_text }}
"""

READING_REQUEST_TEMPLATE = """\
Please provide a personal interpretation of this birth chart:

{{ interpretation }}

Share your insights as if you're having a one-on-one conversation with the person, focusing on:
1. Their unique personality and potential
2. Key life themes and patterns
3. Important relationships and career directions
4. Opportunities for growth and development

Please structure your response in a natural, flowing conversation.
"""


def _chart_context(chart: BirthChart) -> dict[str, Any]:
    timezone = chart.birth_data.location.timezone
    return {
        "birth": chart.birth_data,
        "timezone": "" if timezone is None else timezone,
        "angles": chart.angles,
        "planets": [
            {
                "name": display_name(name),
                "degree": placement.degree,
                "sign": placement.sign,
                "element": placement.element,
                "house": placement.house if placement.house is not None else "?",
                "retrograde": placement.is_retrograde,
            }
            for name, placement in chart.planets.items()
        ],
        "houses": chart.houses,
        "aspects": [
            {
                "first": display_name(aspect.planet1),
                "first_sign": getattr(chart.placement(aspect.planet1), "sign", ""),
                "kind": aspect.aspect,
                "second": display_name(aspect.planet2),
                "second_sign": getattr(chart.placement(aspect.planet2), "sign", ""),
                "orb": aspect.orb,
            }
            for aspect in chart.aspects
        ],
        "elements": elemental_balance(chart).distribution,
        "modalities": modal_balance(chart).distribution,
        "stelliums": [stellium.describe() for stellium in find_stelliums(chart)],
        "patterns": [pattern.describe() for pattern in find_aspect_patterns(chart)],
    }


def format_birth_chart(chart: BirthChart | Mapping[str, Any]) -> str:
    """Render the raw chart listing used as reference data in the system prompt."""

    birth_chart = coerce_chart(chart)
    return get_renderer().render(CHART_DATA_TEMPLATE, _chart_context(birth_chart))


def build_system_prompt(chart_text: str) -> str:
    return get_renderer().render(SYSTEM_PROMPT_TEMPLATE, {"chart_text": chart_text})


def build_chat_messages(
    chart: BirthChart | Mapping[str, Any],
    *,
    question: str | None = None,
    history: Sequence[Mapping[str, str]] = (),
) -> list[dict[str, str]]:
    """Assemble the message list for one chat turn about ``chart``.

    Without a ``question`` the user turn asks for a full reading and carries
    the interpretation report; otherwise prior ``history`` turns are replayed
    and ``question`` becomes the final user message.
    """

    birth_chart = coerce_chart(chart)
    messages = [
        {"role": "system", "content": build_system_prompt(format_birth_chart(birth_chart))}
    ]
    if question is None:
        report = interpret_chart(birth_chart).text
        messages.append(
            {
                "role": "user",
                "content": get_renderer().render(
                    READING_REQUEST_TEMPLATE, {"interpretation": report}
                ),
            }
        )
        return messages

    for index, turn in enumerate(history):
        role, content = turn.get("role"), turn.get("content")
        if not isinstance(role, str) or not isinstance(content, str):
            raise ValueError(f"history turn {index} needs string 'role' and 'content' values")
        messages.append({"role": role, "content": content})
    messages.append({"role": "user", "content": question})
    return messages


__all__ = [
    "CHART_DATA_TEMPLATE",
    "READING_REQUEST_TEMPLATE",
    "SYSTEM_PROMPT_TEMPLATE",
    "build_chat_messages",
    "build_system_prompt",
    "format_birth_chart",
]
