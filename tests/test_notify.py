from __future__ import annotations

from notepads.notify import Notifier


def test_info_only_reaches_sink_when_verbose() -> None:
    messages: list[tuple[str, str]] = []
    notifier = Notifier(verbose=False, sink=lambda level, message: messages.append((level, message)))
    notifier.info("hidden")
    notifier.success("done")
    notifier.warn("careful")
    notifier.verbose = True
    notifier.info("shown")
    assert messages == [("success", "done"), ("warning", "careful"), ("info", "shown")]


def test_notifier_without_sink_is_silent() -> None:
    notifier = Notifier(verbose=True)
    notifier.info("nobody listens")
    notifier.warn("still fine")
