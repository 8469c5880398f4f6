from xpathcraft.element_analyzer import ElementAnalyzer
from xpathcraft.lxml_adapter import LxmlTreeAdapter
from xpathcraft.oracle import EvaluationOracle
from xpathcraft.relative_strategy import RelativeStrategy, parent_expression, unique_attributes
from xpathcraft.strategy_manager import StrategyManager


def _context(adapter, node):
    oracle = EvaluationOracle(adapter)
    analyzer = ElementAnalyzer(adapter, oracle)
    return StrategyManager(adapter, oracle, analyzer).build_context(node, analyzer.analyze(node))


def test_sibling_text_locates_the_next_item() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><ul id='menu'><li>One</li><li>Two</li></ul></body></html>")
    second = adapter.evaluate("//li")[1]
    ctx = _context(adapter, second)
    strategy = RelativeStrategy()

    assert strategy.is_applicable(second, ctx)
    assert strategy.generate(second, ctx) == "//li[text()='One']/following-sibling::li"
    assert strategy.get_score(second, ctx) == 98


def test_child_position_under_an_identified_parent() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><div id='grid'><i/><i/><i/></div></body></html>")
    third = adapter.evaluate("//i")[2]
    ctx = _context(adapter, third)

    assert RelativeStrategy().index_paths(third, ctx) == [
        "//*[@id='grid']/*[3]",
        "//*[@id='grid']/i[3]",
        "//i[3]",
    ]
    assert RelativeStrategy().generate(third, ctx) == "//*[@id='grid']/*[3]"


def test_sibling_ids_anchor_with_the_right_axis() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div><h2 id='totals'>Totals</h2><span/><span/></div></body></html>"
    )
    span = adapter.first("//span")
    paths = RelativeStrategy().sibling_paths(span, _context(adapter, span))
    assert paths[0] == "//*[@id='totals']/following-sibling::span"


def test_parent_expression_skips_body_and_non_unique_classes() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div class='row'><b/></div><div class='row'><b/></div></body></html>"
    )
    bold = adapter.first("//b")
    ctx = _context(adapter, bold)

    assert parent_expression(ctx, adapter.first("//body")) is None
    assert parent_expression(ctx, adapter.first("//div")) is None


def test_unique_attributes_ignore_styling_and_framework_noise() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div class='x' data-styled-abc='q' role='grid' style='color: red' title=''>"
        "<b/></div></body></html>"
    )
    div = adapter.first("//div")
    assert unique_attributes(_context(adapter, div), div) == [("role", "grid")]


def test_root_has_no_parent_to_be_relative_to() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><p>x</p></body></html>")
    root = adapter.root()
    assert not RelativeStrategy().is_applicable(root, _context(adapter, root))


def test_generated_ids_stay_out_of_parent_paths() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div id='react-select-3' role='listbox'><span/></div><span/></body></html>"
    )
    span = adapter.first("//span")
    wrapper = adapter.first("//div")
    ctx = _context(adapter, span)

    assert unique_attributes(ctx, wrapper) == [("role", "listbox")]
    paths = RelativeStrategy().parent_paths(span, ctx)
    assert paths == ["//div[@role='listbox']//span"]
