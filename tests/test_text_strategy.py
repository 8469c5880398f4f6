from xpathcraft.element_analyzer import ElementAnalyzer
from xpathcraft.lxml_adapter import LxmlTreeAdapter
from xpathcraft.oracle import EvaluationOracle
from xpathcraft.strategy_manager import StrategyManager
from xpathcraft.text_strategy import (
    TextStrategy,
    detect_duplicate_text,
    indexed_text_expression,
    is_button_like,
    is_link,
)


def _context(adapter, node):
    oracle = EvaluationOracle(adapter)
    analyzer = ElementAnalyzer(adapter, oracle)
    return StrategyManager(adapter, oracle, analyzer).build_context(node, analyzer.analyze(node))


def test_button_text_gets_the_button_formulation_and_bonus() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div><button type='button'>Save</button><p>Other</p></div></body></html>"
    )
    button = adapter.first("//button")
    ctx = _context(adapter, button)
    strategy = TextStrategy()

    assert strategy.is_applicable(button, ctx)
    assert strategy.generate(button, ctx) == "//button[text()='Save']"
    assert strategy.get_score(button, ctx) == 410


def test_link_text_scores_below_buttons() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><a href='/help'>Help</a></body></html>")
    link = adapter.first("//a")
    ctx = _context(adapter, link)

    assert is_link(ctx, link)
    assert TextStrategy().generate(link, ctx) == "//a[text()='Help']"
    assert TextStrategy().get_score(link, ctx) == 390


def test_apostrophes_switch_literal_quotes() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><p>Don't stop</p></body></html>")
    paragraph = adapter.first("//p")
    assert TextStrategy().generate(paragraph, _context(adapter, paragraph)) == "//p[text()=\"Don't stop\"]"


def test_duplicate_text_falls_back_to_a_positional_text_match() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><div id='status-list'>"
        "<span>Active</span><span>Active</span><span>Active</span>"
        "</div></body></html>"
    )
    second = adapter.evaluate("//span")[1]
    ctx = _context(adapter, second)

    duplicates = detect_duplicate_text(ctx, second, "Active")
    assert duplicates.has_duplicates
    assert duplicates.count == 3

    assert TextStrategy().generate(second, ctx) == "(//span[text()='Active'])[2]"
    assert TextStrategy().get_score(second, ctx) == 260


def test_duplicate_text_prefers_a_container_scope() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body>"
        "<section id='bill-to'><label>Email</label><input/></section>"
        "<section id='ship-to'><label>Email</label><input/></section>"
        "</body></html>"
    )
    label = adapter.evaluate("//label")[1]
    ctx = _context(adapter, label)

    assert TextStrategy().generate(label, ctx) == "//*[@id='ship-to']//label[text()='Email']"


def test_indexed_text_expression_counts_same_tag_matches() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><b>x</b><i>x</i><b>x</b></body></html>")
    last = adapter.evaluate("//b")[1]
    assert indexed_text_expression(_context(adapter, last), last, "x") == "(//b[text()='x'])[2]"


def test_not_applicable_without_short_own_text() -> None:
    long_text = "word " * 20
    adapter = LxmlTreeAdapter.from_xml(
        f"<html><body><div><span>child</span></div><p>{long_text}</p></body></html>"
    )
    div = adapter.first("//div")
    paragraph = adapter.first("//p")

    assert not TextStrategy().is_applicable(div, _context(adapter, div))
    assert not TextStrategy().is_applicable(paragraph, _context(adapter, paragraph))


def test_button_like_detection() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body>"
        "<input id='go' type='submit' value='Go'/>"
        "<div id='fake' role='button'>Fake</div>"
        "<a id='styled' class='btn'>Styled</a>"
        "<span id='plain'>Plain</span>"
        "</body></html>"
    )

    def check(node_id):
        node = adapter.first(f"//*[@id='{node_id}']")
        return is_button_like(_context(adapter, node), node)

    assert check("go")
    assert check("fake")
    assert check("styled")
    assert not check("plain")


def test_not_applicable_to_invisible_nodes() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><em style='height:0px'>Flat</em><b>Shown</b></body></html>"
    )
    flat = adapter.first("//em")
    shown = adapter.first("//b")

    assert not TextStrategy().is_applicable(flat, _context(adapter, flat))
    assert TextStrategy().is_applicable(shown, _context(adapter, shown))


def test_span_inside_a_button_is_located_as_itself() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><button><span>Go</span></button></body></html>")
    span = adapter.first("//span")
    ctx = _context(adapter, span)
    strategy = TextStrategy()

    assert all(not expression.startswith("//button") for expression in strategy.formulations(span, ctx, "Go"))
    assert strategy.generate(span, ctx) == "//span[text()='Go']"
