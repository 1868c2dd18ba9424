import logging

import pytest
from PIL import Image

from deckdown.config import (
    load_yaml_mapping,
    parse_background,
    parse_font_size,
    parse_slide_config,
    parse_transition_config,
)
from deckdown.local_image import clear_image_cache
from deckdown.models import FontVariant, TitlePrefixConfig, TransitionTiming
from deckdown.templates import (
    TemplateDefaults,
    get_registered_templates,
    has_template,
    register_template,
    unregister_template,
)

FIGMA_COMPONENT = "https://www.figma.com/file/abc/Deck?node-id=1-2"


class TestYaml:
    def test_mapping(self):
        assert load_yaml_mapping("a: 1") == {"a": 1}

    def test_empty_is_empty_mapping(self):
        assert load_yaml_mapping("") == {}

    def test_list_is_rejected(self):
        assert load_yaml_mapping("- a\n- b") is None

    def test_invalid_yaml_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_yaml_mapping("foo: [") is None
        assert "invalid front-matter" in caplog.text

    def test_impossible_date_is_rejected(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_yaml_mapping("date: 2024-13-45") is None
        assert "invalid front-matter" in caplog.text


@pytest.mark.parametrize(
    "value, expected",
    [(48, 48), ("48", 48), (12.5, 12.5), (0, None), (201, None), ("big", None), (True, None)],
)
def test_parse_font_size(value, expected):
    assert parse_font_size(value) == expected


class TestStyles:
    def test_base_color_fills_every_style(self):
        styles = parse_slide_config({"color": "#fff"}).styles
        assert styles.headings.h1.color == "#ffffff"
        assert styles.headings.h4.color == "#ffffff"
        assert styles.paragraphs.color == "#ffffff"
        assert styles.bullets.color == "#ffffff"
        assert styles.code.color == "#ffffff"

    def test_explicit_color_wins_over_base(self):
        config = {"color": "#fff", "headings": {"h1": {"color": "#F00", "size": 64}}}
        headings = parse_slide_config(config).styles.headings
        assert headings.h1.color == "#ff0000"
        assert headings.h1.size == 64
        assert headings.h2.color == "#ffffff"

    def test_invalid_fields_are_dropped(self):
        styles = parse_slide_config(
            {"paragraphs": {"size": 0}, "bullets": {"size": 20, "spacing": -1}}
        ).styles
        assert styles.paragraphs is None
        assert styles.bullets.size == 20
        assert styles.bullets.spacing is None

    def test_unquoted_hex_color_is_ignored(self):
        # Colors must be strings
        styles = parse_slide_config({"paragraphs": {"color": 123}}).styles
        assert styles.paragraphs is None

    def test_no_headings_configured(self):
        assert parse_slide_config({"align": "left"}).styles.headings is None

    def test_fonts(self):
        fonts = parse_slide_config(
            {"fonts": {"h1": "Inter", "body": {"family": "Roboto", "bold": "Black"}}}
        ).styles.fonts
        assert fonts.h1 == FontVariant(family="Inter", style="Regular")
        assert fonts.body.family == "Roboto"
        assert fonts.body.style == "Regular"
        assert fonts.body.bold == "Black"
        assert fonts.code is None

    def test_font_without_family_is_dropped(self):
        assert parse_slide_config({"fonts": {"body": {"bold": "Black"}}}).styles.fonts is None


class TestBackground:
    @pytest.fixture(autouse=True)
    def empty_cache(self):
        clear_image_cache()
        yield
        clear_image_cache()

    def test_hex_string(self):
        background, template = parse_background("#1A1A2E")
        assert background.solid == "#1a1a2e"
        assert template is None

    def test_named_color(self):
        assert parse_background("navy")[0].solid == "navy"

    def test_gradient_string(self):
        background, _ = parse_background("#000:0%,#fff:100%@90")
        assert background.gradient.angle == 90
        assert len(background.gradient.stops) == 2

    def test_figma_component_string(self):
        background, _ = parse_background(FIGMA_COMPONENT)
        assert background.component.node_id == "1:2"
        assert background.component.file_key == "abc"
        assert background.solid is None

    def test_remote_image_string(self):
        background, _ = parse_background("https://example.com/bg.png")
        assert background.image.url == "https://example.com/bg.png"
        assert background.image.source == "remote"
        assert background.image.data_base64 is None

    def test_local_image(self, tmp_path):
        Image.new("RGB", (4, 4)).save(tmp_path / "bg.png")
        background, _ = parse_background("bg.png", tmp_path)
        assert background.image.source == "local"
        assert background.image.mime_type == "image/png"
        assert background.image.data_base64

    def test_missing_local_image(self, tmp_path):
        assert parse_background("missing.png", tmp_path) == (None, None)

    def test_object_priority(self):
        background, template = parse_background({"template": "Brand", "color": "#fff"})
        assert background.template_style == "Brand"
        assert background.solid is None
        assert template == "Brand"

        background, _ = parse_background({"gradient": "#000:0%,#fff:100%", "color": "#fff"})
        assert background.gradient is not None
        assert background.solid is None

    def test_component_layers_over_color(self):
        background, _ = parse_background(
            {
                "color": "#000",
                "component": {
                    "link": FIGMA_COMPONENT,
                    "fit": "Contain",
                    "align": "top_left",
                    "opacity": 0.5,
                },
            }
        )
        assert background.solid == "#000000"
        assert background.component.fit == "contain"
        assert background.component.align == "top-left"
        assert background.component.opacity == 0.5

    def test_component_invalid_options_dropped(self):
        background, _ = parse_background(
            {"component": {"link": FIGMA_COMPONENT, "fit": "fill", "opacity": 2}}
        )
        assert background.component.node_id == "1:2"
        assert background.component.fit is None
        assert background.component.opacity is None

    def test_component_requires_node_id(self):
        assert parse_background({"component": "https://www.figma.com/file/abc"}) == (None, None)


class TestSlideNumber:
    def test_boolean_shorthand(self):
        assert parse_slide_config({"slideNumber": True}).slide_number.show is True

    def test_object(self):
        number = parse_slide_config(
            {
                "slideNumber": {
                    "show": True,
                    "position": "middle",
                    "size": 300,
                    "color": "#abc",
                    "paddingX": 40,
                    "format": "{n}/{total}",
                    "startFrom": 2,
                    "offset": -1,
                }
            }
        ).slide_number
        assert number.show is True
        assert number.position is None
        assert number.size is None
        assert number.color == "#aabbcc"
        assert number.padding_x == 40
        assert number.format == "{n}/{total}"
        assert number.start_from == 2
        assert number.offset == -1

    def test_figma_link(self):
        number = parse_slide_config({"slideNumber": {"link": FIGMA_COMPONENT}}).slide_number
        assert number.node_id == "1:2"
        assert number.link == FIGMA_COMPONENT

    def test_all_invalid_is_unset(self):
        assert parse_slide_config({"slideNumber": {"startFrom": 0}}).slide_number is None

    @pytest.mark.parametrize(
        "field, value",
        [("startFrom", float("inf")), ("offset", float("nan")), ("offset", "-inf"), ("paddingX", "inf")],
    )
    def test_non_finite_numbers_are_ignored(self, field, value):
        assert parse_slide_config({"slideNumber": {field: value}}).slide_number is None


class TestTitlePrefix:
    def test_false_disables(self):
        assert parse_slide_config({"titlePrefix": False}).title_prefix is False

    def test_link(self):
        prefix = parse_slide_config(
            {"titlePrefix": {"link": FIGMA_COMPONENT, "spacing": 16}}
        ).title_prefix
        assert prefix == TitlePrefixConfig(node_id="1:2", link=FIGMA_COMPONENT, spacing=16)

    def test_template_default(self):
        register_template("Brand", TemplateDefaults(title_prefix=TitlePrefixConfig(node_id="9:9")))
        try:
            config = parse_slide_config({"background": {"template": "Brand"}})
            assert config.title_prefix.node_id == "9:9"

            config = parse_slide_config(
                {"background": {"template": "Brand"}, "titlePrefix": False}
            )
            assert config.title_prefix is False
        finally:
            unregister_template("Brand")

    def test_registry(self):
        register_template("Deck", TemplateDefaults())
        try:
            assert has_template("Deck")
            assert "Deck" in get_registered_templates()
        finally:
            unregister_template("Deck")
        assert not has_template("Deck")

    def test_unknown_template(self):
        config = parse_slide_config({"background": {"template": "Nope"}})
        assert config.title_prefix is None


class TestTransition:
    def test_shorthand(self):
        transition = parse_transition_config("dissolve 0.5")
        assert transition.style == "dissolve"
        assert transition.duration == 0.5

    def test_snake_case_style(self):
        assert parse_transition_config("slide_from_left").style == "slide-from-left"

    def test_unknown_style(self):
        assert parse_transition_config("wobble") is None

    def test_blank_shorthand(self):
        assert parse_transition_config("   ") is None

    def test_object_form(self):
        transition = parse_transition_config(
            {
                "style": "push_from_right",
                "duration": 20,
                "curve": "EASE_IN",
                "timing": {"type": "after_delay", "delay": 45},
            }
        )
        assert transition.style == "push-from-right"
        assert transition.duration is None
        assert transition.curve == "ease-in"
        assert transition.timing == TransitionTiming(type="after-delay")

    def test_string_timing(self):
        transition = parse_transition_config({"style": "dissolve", "timing": "on_click"})
        assert transition.timing == "on-click"


class TestLayout:
    def test_align(self):
        config = parse_slide_config({"align": "center", "valign": "middle"})
        assert (config.align, config.valign) == ("center", "middle")

    def test_invalid_align(self):
        config = parse_slide_config({"align": "centre", "valign": "left"})
        assert (config.align, config.valign) == (None, None)

    def test_cover(self):
        assert parse_slide_config({"cover": False}).cover is False
        assert parse_slide_config({"cover": "yes"}).cover is None


def test_empty_config():
    config = parse_slide_config(None)
    assert config.background is None
    assert config.styles.headings is None
