"""
Action utilities.

Each function performs one UI action on a selector string or a resolved
Locator. The element is first waited on until visible within the options'
timeout, the action is performed, and the action is logged and recorded as a
report step. Driver timeouts surface as ActionTimeoutError.

Script-based variants (``click_by_js``, ``clear_by_js``) bypass simulated
input and are only used when the caller asks for them.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence, Union

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..core.exceptions import ActionTimeoutError
from ..core.logging_config import HarnessLogger
from .options import ActionOptions

Target = Union[str, Locator]

MOUSE_STEP_PAUSE = 0.05


def describe(target: Target) -> str:
    return target if isinstance(target, str) else "locator"


def _options(options: Optional[ActionOptions]) -> ActionOptions:
    return options if options is not None else ActionOptions()


def _logger(options: ActionOptions) -> HarnessLogger:
    return options.logger or HarnessLogger.get_instance()


def _timeout_error(
    action: str, target: Target, options: ActionOptions, error: Exception
) -> ActionTimeoutError:
    return ActionTimeoutError(
        f"{action} on '{describe(target)}' exceeded {options.effective_timeout:g}ms: {error}",
        action=action,
        target=describe(target),
        timeout=options.effective_timeout,
    )


async def resolve(target: Target, options: ActionOptions) -> Locator:
    """
    Resolve a target to a Locator and wait until it is visible.

    Raises:
        ValueError: if a selector string is given without a page
        ActionTimeoutError: if the element is not visible in time
    """
    if isinstance(target, str):
        locator = options.require_page("locator").locator(target)
    else:
        locator = target

    try:
        await locator.wait_for(state="visible", timeout=options.effective_timeout)
    except PlaywrightTimeoutError as e:
        raise _timeout_error("wait for visible", target, options, e) from e
    return locator


def _record(options: ActionOptions, step: str, details: Optional[str] = None) -> None:
    if options.reporter is not None:
        options.reporter.add_step(step, details)


@asynccontextmanager
async def _action(
    name: str, target: Target, options: ActionOptions, step: Optional[str] = None
) -> AsyncIterator[Locator]:
    """Log, resolve, yield the locator, then record the step on success."""
    logger = _logger(options)
    logger.info(f"{name}: {describe(target)}")
    locator = await resolve(target, options)
    try:
        yield locator
    except PlaywrightTimeoutError as e:
        raise _timeout_error(name, target, options, e) from e
    _record(options, step or f"{name} element", describe(target))


@asynccontextmanager
async def _page_action(
    name: str, options: ActionOptions, step: Optional[str] = None
) -> AsyncIterator[Page]:
    page = options.require_page(name.lower())
    _logger(options).info(name)
    try:
        yield page
    except PlaywrightTimeoutError as e:
        raise _timeout_error(name, "page", options, e) from e
    _record(options, step or name)


# Click actions


async def click(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Click", target, opts) as locator:
        await locator.click(**opts.pointer_kwargs())


async def click_and_navigate(
    target: Target, options: Optional[ActionOptions] = None
) -> None:
    """Click and wait for the page to reach network idle."""
    opts = _options(options)
    async with _action("Click and navigate", target, opts) as locator:
        await locator.click(**opts.merge(no_wait_after=False).pointer_kwargs())
        if opts.page is not None:
            await opts.page.wait_for_load_state(
                "networkidle", timeout=opts.effective_timeout
            )


async def click_by_js(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Click by JS", target, opts) as locator:
        await locator.evaluate("element => element.click()")


async def double_click(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Double click", target, opts) as locator:
        await locator.dblclick(**opts.pointer_kwargs())


# Fill and typing actions


async def fill(target: Target, value: str, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Fill", target, opts, step=f"Fill input: {value}") as locator:
        await locator.fill(
            value,
            timeout=opts.effective_timeout,
            force=opts.force,
            no_wait_after=opts.no_wait_after,
        )


async def fill_and_enter(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> None:
    opts = _options(options)
    async with _action(
        "Fill and Enter", target, opts, step=f"Fill input and press Enter: {value}"
    ) as locator:
        await locator.fill(value, timeout=opts.effective_timeout)
        await locator.press("Enter", timeout=opts.effective_timeout)


async def fill_and_tab(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> None:
    opts = _options(options)
    async with _action(
        "Fill and Tab", target, opts, step=f"Fill input and press Tab: {value}"
    ) as locator:
        await locator.fill(value, timeout=opts.effective_timeout)
        await locator.press("Tab", timeout=opts.effective_timeout)


async def fill_and_type(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> None:
    """Fill ``value`` then type ``options.additional_text`` key by key."""
    opts = _options(options)
    async with _action("Fill and type", target, opts, step=f"Fill input: {value}") as locator:
        await locator.fill(value, timeout=opts.effective_timeout)
        await locator.press_sequentially(
            opts.additional_text, delay=opts.delay, timeout=opts.effective_timeout
        )


async def press_sequentially(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> None:
    opts = _options(options)
    async with _action("Press sequentially", target, opts) as locator:
        await locator.press_sequentially(
            value, delay=opts.delay, timeout=opts.effective_timeout
        )


async def press_page_keyboard(key: str, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _page_action(f"Press key {key}", opts) as page:
        await page.keyboard.press(key, delay=opts.delay)


async def clear(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Clear", target, opts) as locator:
        await locator.clear(timeout=opts.effective_timeout, force=opts.force)


async def clear_by_js(target: Target, options: Optional[ActionOptions] = None) -> None:
    """Empty the value through script and dispatch an ``input`` event."""
    opts = _options(options)
    async with _action("Clear by JS", target, opts) as locator:
        await locator.evaluate(
            "element => {"
            " element.value = '';"
            " element.dispatchEvent(new Event('input', { bubbles: true }));"
            " }"
        )


# Checkbox and radio actions


async def check(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Check", target, opts) as locator:
        await locator.check(timeout=opts.effective_timeout, force=opts.force)


async def uncheck(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Uncheck", target, opts) as locator:
        await locator.uncheck(timeout=opts.effective_timeout, force=opts.force)


# Dropdown actions


async def select_by_value(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> List[str]:
    opts = _options(options)
    async with _action("Select", target, opts, step=f"Select option: {value}") as locator:
        selected = await locator.select_option(value=value, timeout=opts.effective_timeout)
    return selected


async def select_by_values(
    target: Target, values: Sequence[str], options: Optional[ActionOptions] = None
) -> List[str]:
    opts = _options(options)
    async with _action(
        "Select values", target, opts, step=f"Select options: {', '.join(values)}"
    ) as locator:
        selected = await locator.select_option(
            value=list(values), timeout=opts.effective_timeout
        )
    return selected


async def select_by_text(
    target: Target, text: str, options: Optional[ActionOptions] = None
) -> List[str]:
    opts = _options(options)
    async with _action("Select text", target, opts, step=f"Select option: {text}") as locator:
        selected = await locator.select_option(label=text, timeout=opts.effective_timeout)
    return selected


async def select_by_index(
    target: Target, index: int, options: Optional[ActionOptions] = None
) -> List[str]:
    opts = _options(options)
    async with _action(
        "Select index", target, opts, step=f"Select option at index {index}"
    ) as locator:
        selected = await locator.select_option(index=index, timeout=opts.effective_timeout)
    return selected


# Dialogs


async def accept_alert(options: Optional[ActionOptions] = None) -> None:
    """Accept the next dialog the page opens."""
    opts = _options(options)
    async with _page_action("Accept alert", opts) as page:
        page.once("dialog", lambda dialog: dialog.accept())


async def dismiss_alert(options: Optional[ActionOptions] = None) -> None:
    """Dismiss the next dialog the page opens."""
    opts = _options(options)
    async with _page_action("Dismiss alert", opts) as page:
        page.once("dialog", lambda dialog: dialog.dismiss())


async def get_alert_text(options: Optional[ActionOptions] = None) -> str:
    """
    Wait for the next dialog, accept it and return its message.

    Raises:
        ActionTimeoutError: if no dialog opens within the timeout
    """
    opts = _options(options)
    page = opts.require_page("alert")
    loop = asyncio.get_running_loop()
    message: asyncio.Future = loop.create_future()

    def on_dialog(dialog):
        if not message.done():
            message.set_result(dialog.message)
        return dialog.accept()

    page.once("dialog", on_dialog)
    _logger(opts).info("Wait for alert")
    try:
        text = await asyncio.wait_for(message, timeout=opts.effective_timeout / 1000)
    except asyncio.TimeoutError as e:
        raise _timeout_error("Wait for alert", "page", opts, e) from e
    finally:
        if message.cancelled():
            page.remove_listener("dialog", on_dialog)
    _record(opts, "Read alert text", text)
    return text


# Mouse and focus


async def hover(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Hover", target, opts) as locator:
        await locator.hover(timeout=opts.effective_timeout, force=opts.force)


async def focus(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Focus", target, opts) as locator:
        await locator.focus(timeout=opts.effective_timeout)


async def drag_and_drop(
    target: Target, destination: Target, options: Optional[ActionOptions] = None
) -> None:
    opts = _options(options)
    async with _action(
        "Drag and drop", target, opts, step=f"Drag to {describe(destination)}"
    ) as locator:
        if isinstance(destination, str):
            destination = opts.require_page("drag").locator(destination)
        await locator.drag_to(
            destination, timeout=opts.effective_timeout, force=opts.force
        )


async def simulate_mouse_movement(
    from_x: float,
    from_y: float,
    to_x: float,
    to_y: float,
    options: Optional[ActionOptions] = None,
    steps: int = 10,
) -> None:
    """Move the mouse in ``steps`` equal increments, pausing between moves."""
    if steps < 1:
        raise ValueError(f"steps must be at least 1, got {steps}")
    opts = _options(options)
    delta_x = (to_x - from_x) / steps
    delta_y = (to_y - from_y) / steps
    async with _page_action(
        "Mouse movement", opts, step=f"Move mouse ({from_x}, {from_y}) -> ({to_x}, {to_y})"
    ) as page:
        for i in range(steps + 1):
            await page.mouse.move(from_x + delta_x * i, from_y + delta_y * i)
            await asyncio.sleep(MOUSE_STEP_PAUSE)


# Files


async def download_file(
    target: Target, path: Union[str, Path], options: Optional[ActionOptions] = None
) -> Path:
    """Click the target and save the download it triggers to ``path``."""
    opts = _options(options)
    page = opts.require_page("download")
    async with _action("Download", target, opts, step=f"Download file to {path}") as locator:
        async with page.expect_download(timeout=opts.effective_timeout) as download_info:
            await locator.click(timeout=opts.effective_timeout)
        download = await download_info.value
        await download.save_as(path)
    return Path(path)


async def upload_files(
    target: Target,
    paths: Union[str, Path, Sequence[Union[str, Path]]],
    options: Optional[ActionOptions] = None,
) -> None:
    opts = _options(options)
    files = [paths] if isinstance(paths, (str, Path)) else list(paths)
    async with _action(
        "Upload", target, opts, step=f"Upload {len(files)} file(s)"
    ) as locator:
        await locator.set_input_files(files, timeout=opts.effective_timeout)


# Scrolling


async def scroll_into_view(target: Target, options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _action("Scroll into view", target, opts) as locator:
        await locator.scroll_into_view_if_needed(timeout=opts.effective_timeout)


async def scroll_to_top(options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _page_action("Scroll to top", opts) as page:
        await page.evaluate("() => window.scrollTo(0, 0)")


async def scroll_to_bottom(options: Optional[ActionOptions] = None) -> None:
    opts = _options(options)
    async with _page_action("Scroll to bottom", opts) as page:
        await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")


# Element inspection and manipulation


async def get_text_content(target: Target, options: Optional[ActionOptions] = None) -> str:
    """Text content including hidden text; empty string when there is none."""
    opts = _options(options)
    async with _action("Get text content", target, opts) as locator:
        text = await locator.text_content(timeout=opts.effective_timeout)
    return text or ""


async def get_inner_html(target: Target, options: Optional[ActionOptions] = None) -> str:
    opts = _options(options)
    async with _action("Get inner HTML", target, opts) as locator:
        html = await locator.inner_html(timeout=opts.effective_timeout)
    return html


async def get_outer_html(target: Target, options: Optional[ActionOptions] = None) -> str:
    opts = _options(options)
    async with _action("Get outer HTML", target, opts) as locator:
        html = await locator.evaluate("element => element.outerHTML")
    return html


async def get_input_value(target: Target, options: Optional[ActionOptions] = None) -> str:
    opts = _options(options)
    async with _action("Get input value", target, opts) as locator:
        value = await locator.input_value(timeout=opts.effective_timeout)
    return value


async def set_input_value(
    target: Target, value: str, options: Optional[ActionOptions] = None
) -> None:
    opts = _options(options)
    async with _action("Set input value", target, opts, step=f"Set value: {value}") as locator:
        await locator.fill(value, timeout=opts.effective_timeout)


async def trigger_event(
    target: Target,
    event_type: str,
    event_data: Optional[dict] = None,
    options: Optional[ActionOptions] = None,
) -> None:
    """Dispatch a CustomEvent carrying ``event_data`` as its detail."""
    opts = _options(options)
    async with _action(
        "Trigger event", target, opts, step=f"Trigger event: {event_type}"
    ) as locator:
        await locator.evaluate(
            "(element, args) =>"
            " element.dispatchEvent(new CustomEvent(args.type, { detail: args.data }))",
            {"type": event_type, "data": event_data},
        )
