from __future__ import annotations

from gherkinbind.core.model import Examples
from gherkinbind.core.outline import expand_outline
from tests.support.builders import make_examples, make_scenario, make_step


def _outline():
    return make_scenario(
        "Feeding",
        make_step("Given", "I have <count> cats"),
        make_step("When", "I feed <count> cats <food>"),
        make_step("Then", "nobody is hungry", table=[["<count>"]]),
        examples=(
            make_examples(["count", "food"], ["3", "fish"], ["5", "<food>"]),
            make_examples(["count"], ["1"], name="single"),
        ),
    )


def test_one_scenario_per_row_in_table_order():
    expanded = expand_outline(_outline())
    assert [s.name for s in expanded] == ["Feeding (1)", "Feeding (2)", "Feeding -- single (1)"]
    assert all(len(s.steps) == 3 for s in expanded)
    assert all(s.examples == () for s in expanded)


def test_placeholders_are_replaced_literally():
    first, second, third = expand_outline(_outline())
    assert first.steps[0].text == "I have 3 cats"
    assert first.steps[1].text == "I feed 3 cats fish"
    assert second.steps[1].text == "I feed 5 cats <food>"
    # Placeholders without a column are left alone.
    assert third.steps[1].text == "I feed 1 cats <food>"


def test_template_is_not_mutated():
    outline = _outline()
    expand_outline(outline)
    assert outline.steps[0].text == "I have <count> cats"
    assert len(outline.examples) == 2


def test_only_text_is_rewritten():
    first = expand_outline(_outline())[0]
    assert first.steps[2].data_table.rows == (("<count>",),)
    assert first.steps[0].keyword == "Given "


def test_examples_without_header_are_skipped():
    outline = make_scenario("Empty", make_step("Given", "x"), examples=(Examples(name="", header=None),))
    assert expand_outline(outline) == []
