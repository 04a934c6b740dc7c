import asyncio

from mushi.services.reveal import RevealController


def test_visible_slices_and_never_fails_past_the_end():
    reveal = RevealController(page_size=20)
    items = list(range(45))
    assert reveal.visible(items) == list(range(20))
    reveal.load_more()
    reveal.load_more()
    reveal.load_more()
    assert reveal.visible_count == 80
    assert reveal.visible(items) == items
    assert not reveal.has_more(len(items))


def test_reset_returns_to_one_page():
    reveal = RevealController(page_size=20)
    for _ in range(6):
        reveal.load_more()
    assert reveal.visible_count == 140
    reveal.reset()
    assert reveal.visible_count == 20


async def test_sentinel_advances_after_debounce_and_ignores_repeats():
    reveal = RevealController(page_size=20, debounce=0.01)

    assert reveal.on_sentinel_visible() is True
    assert reveal.on_sentinel_visible() is False
    assert reveal.visible_count == 20

    await asyncio.sleep(0.05)
    assert reveal.visible_count == 40
    assert not reveal.in_flight

    assert reveal.on_sentinel_visible() is True
    await asyncio.sleep(0.05)
    assert reveal.visible_count == 60


async def test_reset_cancels_pending_advance():
    reveal = RevealController(page_size=20, debounce=0.01)
    reveal.on_sentinel_visible()
    reveal.reset()
    await asyncio.sleep(0.05)
    assert reveal.visible_count == 20


async def test_closed_controller_ignores_sentinel():
    reveal = RevealController(page_size=20, debounce=0.01)
    reveal.on_sentinel_visible()
    reveal.close()
    assert reveal.on_sentinel_visible() is False
    await asyncio.sleep(0.05)
    assert reveal.visible_count == 20
