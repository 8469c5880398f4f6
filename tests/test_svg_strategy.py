from xpathcraft.element_analyzer import ElementAnalyzer
from xpathcraft.lxml_adapter import LxmlTreeAdapter
from xpathcraft.oracle import EvaluationOracle
from xpathcraft.strategy_manager import StrategyManager
from xpathcraft.svg_strategy import SvgStrategy, descendant_suffix, find_labelled_parent

CLOSE_BUTTONS = (
    "<html><body>"
    "<button aria-label='Close dialog'><svg viewBox='0 0 24 24'><title>Close</title><path d='M0'/></svg></button>"
    "<button aria-label='Close panel'><svg viewBox='0 0 24 24'><title>Close</title><path d='M0'/></svg></button>"
    "</body></html>"
)


def _context(adapter, node):
    oracle = EvaluationOracle(adapter)
    analyzer = ElementAnalyzer(adapter, oracle)
    return StrategyManager(adapter, oracle, analyzer).build_context(node, analyzer.analyze(node))


def test_labelled_parent_disambiguates_identical_icons() -> None:
    adapter = LxmlTreeAdapter.from_xml(CLOSE_BUTTONS)
    svg = adapter.evaluate("//svg")[1]
    ctx = _context(adapter, svg)
    strategy = SvgStrategy()

    assert strategy.is_applicable(svg, ctx)
    assert strategy.generate(svg, ctx) == "//button[@aria-label='Close panel']//svg"
    assert strategy.get_score(svg, ctx) == 150


def test_shapes_inside_an_svg_get_a_child_path_suffix() -> None:
    adapter = LxmlTreeAdapter.from_xml(CLOSE_BUTTONS)
    path = adapter.evaluate("//path")[1]
    ctx = _context(adapter, path)

    assert descendant_suffix(adapter, adapter.evaluate("//svg")[1], path) == "/*[name()='path'][1]"
    assert SvgStrategy().generate(path, ctx) == "//button[@aria-label='Close panel']//svg/*[name()='path'][1]"


def test_positional_forms_when_nothing_identifies_the_icon() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body>"
        "<span><svg><circle r='1'/></svg></span>"
        "<span><svg><circle r='1'/></svg></span>"
        "</body></html>"
    )
    svg = adapter.evaluate("//svg")[1]
    ctx = _context(adapter, svg)

    assert SvgStrategy().formulations(ctx, ctx.snapshot.basic.svg) == []
    assert SvgStrategy().generate(svg, ctx) == "(//svg)[2]"
    assert SvgStrategy().get_score(svg, ctx) == 85


def test_lowercase_view_box_is_queried_as_written() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><svg viewbox='0 0 9 9'/><svg/></body></html>")
    svg = adapter.first("//svg")
    assert SvgStrategy().generate(svg, _context(adapter, svg)) == "//svg[@viewbox='0 0 9 9']"


def test_labelled_parent_from_a_data_hint_attribute() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div data-tooltip='Delete'><span><svg/></span></div></body></html>"
    )
    labelled = find_labelled_parent(adapter, adapter.first("//svg"))

    assert labelled.node is adapter.first("//div")
    assert labelled.attribute == "data-tooltip"
    assert labelled.value == "Delete"


def test_labelled_parent_search_is_depth_limited() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div title='Far'><p><b><i><svg/></i></b></p></div></body></html>"
    )
    assert find_labelled_parent(adapter, adapter.first("//svg"), max_depth=3) is None
    assert find_labelled_parent(adapter, adapter.first("//svg"), max_depth=4).value == "Far"


def test_not_applicable_outside_svg() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><p>text</p></body></html>")
    paragraph = adapter.first("//p")
    assert not SvgStrategy().is_applicable(paragraph, _context(adapter, paragraph))
