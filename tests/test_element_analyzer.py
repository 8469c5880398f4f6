import pytest

from xpathcraft.element_analyzer import ElementAnalyzer
from xpathcraft.errors import InvalidElement
from xpathcraft.lxml_adapter import LxmlTreeAdapter

SIGNUP_FORM = (
    "<html><body>"
    "<form id='signup'>"
    "<label for='email'>Email</label>"
    "<input id='email' name='email' type='email' data-v-7ba5bd90='' class='field css-1a2b3c'/>"
    "<input name='phone' type='tel'/>"
    "</form>"
    "</body></html>"
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class ExpandoAdapter(LxmlTreeAdapter):
    keys: list[str] = []

    def expando_keys(self, node):
        return list(self.keys)


def test_snapshot_of_a_form_input() -> None:
    adapter = LxmlTreeAdapter.from_xml(SIGNUP_FORM)
    email = adapter.first("//*[@id='email']")
    snapshot = ElementAnalyzer(adapter).analyze(email)

    assert snapshot.basic.tag == "input"
    assert snapshot.basic.type == "email"
    assert snapshot.basic.is_interactive
    assert not snapshot.basic.is_svg
    assert not snapshot.text.has_text

    assert snapshot.context.in_form
    assert not snapshot.context.in_table
    assert snapshot.context.parent.id == "signup"
    assert snapshot.position.sibling_index == 1
    assert snapshot.position.same_tag_index == 0
    assert snapshot.position.depth == 2

    assert snapshot.accessibility.is_labelled
    assert snapshot.accessibility.tab_index == 0


def test_framework_noise_is_separated_from_trusted_attributes() -> None:
    adapter = LxmlTreeAdapter.from_xml(SIGNUP_FORM)
    snapshot = ElementAnalyzer(adapter).analyze(adapter.first("//*[@id='email']"))

    assert snapshot.framework.attributes == ("data-v-7ba5bd90",)
    assert snapshot.framework.has_framework_data
    assert [item.name for item in snapshot.attributes.stable] == ["type", "name", "id", "class"]
    assert ("data-v-7ba5bd90", "") in snapshot.attributes.framework
    assert "data-v-7ba5bd90" not in snapshot.uniqueness.unique_attributes


def test_uniqueness_counts_matches_in_the_document() -> None:
    adapter = LxmlTreeAdapter.from_xml(SIGNUP_FORM)
    snapshot = ElementAnalyzer(adapter).analyze(adapter.first("//input[@name='phone']"))

    assert snapshot.uniqueness.unique_attributes == ("name", "type")
    assert not snapshot.uniqueness.has_unique_id


def test_missing_node_is_rejected() -> None:
    analyzer = ElementAnalyzer(LxmlTreeAdapter.from_xml(SIGNUP_FORM))
    with pytest.raises(InvalidElement):
        analyzer.analyze(None)


def test_snapshots_are_cached_until_the_ttl_passes() -> None:
    adapter = LxmlTreeAdapter.from_xml(SIGNUP_FORM)
    clock = FakeClock()
    analyzer = ElementAnalyzer(adapter, clock=clock)
    email = adapter.first("//*[@id='email']")

    first = analyzer.analyze(email)
    assert analyzer.analyze(email) is first

    clock.now = 5.0
    assert analyzer.analyze(email) is not first

    analyzer.clear_cache()
    assert len(analyzer.cache) == 0


def test_svg_features_are_read_from_the_enclosing_svg() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><button aria-label='Close'>"
        "<svg viewBox='0 0 24 24' width='24'><title>  Close \n icon </title>"
        "<path d='M0'/><path d='M1'/><use href='#x'/></svg>"
        "</button></body></html>"
    )
    analyzer = ElementAnalyzer(adapter)

    path_info = analyzer.svg_info(adapter.first("//path"))
    assert not path_info.is_root
    assert path_info.view_box == "0 0 24 24"
    assert path_info.view_box_attr == "viewBox"
    assert path_info.title_text == "Close icon"
    assert path_info.path_count == 2
    assert path_info.use_count == 1
    assert path_info.use_href == "#x"
    assert path_info.width == "24"

    assert analyzer.svg_info(adapter.first("//svg")).is_root
    assert analyzer.svg_info(adapter.first("//button")) is None


def test_lowercase_view_box_attribute_is_remembered() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><svg viewbox='0 0 1 1'/></body></html>")
    info = ElementAnalyzer(adapter).svg_info(adapter.first("//svg"))
    assert info.view_box == "0 0 1 1"
    assert info.view_box_attr == "viewbox"


@pytest.mark.parametrize(
    ("keys", "expected"),
    [
        (["__reactFiber$k2j1"], "react"),
        (["_reactInternal"], "react"),
        (["__vue__"], "vue"),
        (["__ngContext__"], "angular"),
        ([], "vanilla"),
    ],
)
def test_framework_type_from_expando_keys(keys, expected) -> None:
    adapter = ExpandoAdapter.from_xml("<html><body><div>x</div></body></html>")
    adapter.keys = keys
    assert ElementAnalyzer(adapter).framework_type(adapter.first("//div")) == expected


def test_angular_marker_attribute() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><div ng-version='17.0.0'>x</div></body></html>")
    assert ElementAnalyzer(adapter).framework_type(adapter.first("//div")) == "angular"


def test_interactivity_rules() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body>"
        "<div id='plain'>a</div><div id='role' role='button'>b</div>"
        "<div id='focus' tabindex='0'>c</div><a id='anchor'>d</a>"
        "</body></html>"
    )
    analyzer = ElementAnalyzer(adapter)

    assert not analyzer.is_interactive(adapter.first("//*[@id='plain']"))
    assert analyzer.is_interactive(adapter.first("//*[@id='role']"))
    assert analyzer.is_interactive(adapter.first("//*[@id='focus']"))
    assert analyzer.is_interactive(adapter.first("//*[@id='anchor']"))
    assert analyzer.tab_index(adapter.first("//*[@id='anchor']")) == -1
