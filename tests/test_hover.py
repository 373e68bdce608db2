from molang_ls.lsp.hover import hover_for_position
from molang_ls.schema.resolver import ChainResolver

SENT_OUT = "event:POKEMON_SENT_OUT"


def _hover(resolver, code, needle, runtime=None, shift=1):
    return hover_for_position(resolver, code, 0, code.index(needle) + shift, runtime)


def test_hover_query_member(bundled: ChainResolver):
    hover = _hover(bundled, "t.id = q.pokemon.species.identifier;", "identifier", SENT_OUT)
    assert hover is not None
    text = hover.contents.value
    assert "q.pokemon.species.identifier → String" in text
    assert "Namespaced identifier" in text


def test_hover_intermediate_segment(bundled: ChainResolver):
    hover = _hover(bundled, "q.pokemon.species.identifier", "species", SENT_OUT)
    text = hover.contents.value
    assert "q.pokemon.species → Struct" in text
    assert "*Struct type: `species`*" in text


def test_hover_query_variable(bundled: ChainResolver):
    hover = _hover(bundled, "q.poke_ball", "poke_ball", "event:POKEMON_CAPTURED")
    assert "Identifier of the ball used." in hover.contents.value


def test_hover_lists_parameters(bundled: ChainResolver):
    hover = _hover(bundled, "q.player.tell('hi');", "tell", SENT_OUT)
    text = hover.contents.value
    assert "q.player.tell(message: String, overlay: Boolean?) → Unit" in text
    assert "**Parameters:**" in text
    assert "- `overlay`: Boolean *(optional)*" in text


def test_hover_math(bundled: ChainResolver):
    hover = _hover(bundled, "math.clamp(t.x, 0, 1)", "clamp")
    assert "math.clamp(value: Number, min: Number, max: Number) → Number" in hover.contents.value


def test_hover_keyword(bundled: ChainResolver):
    hover = _hover(bundled, "fn('a', () -> {})", "fn")
    assert "f.name()" in hover.contents.value


def test_hover_misses(bundled: ChainResolver):
    assert _hover(bundled, "q.pokemon.missing", "missing", SENT_OUT) is None
    assert _hover(bundled, "t.value", "value") is None
    assert _hover(bundled, "plain", "plain") is None
    assert _hover(bundled, "q.pokemon.level", "level", "event:BATTLE_VICTORY") is not None
