import logging
from unittest.mock import Mock

from riseadmin.errors import EncodeFailedError, ImageLoadError
from riseadmin.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity, user_message
from riseadmin.events.bus import EventBus


def test_handle_error_logs_and_publishes():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    handler = ErrorHandler(logger, event_bus)

    error = EncodeFailedError("empty payload")
    handler.handle(error, ErrorSeverity.ERROR, context={"stage": "extract"})

    logger.error.assert_called_once()
    assert logger.error.call_args.kwargs["extra"] == {"context": {"stage": "extract"}}
    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR
    assert event.context == {"stage": "extract"}


def test_ui_callback_receives_user_facing_errors():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(RuntimeError("ui error"), ErrorSeverity.CRITICAL)

    callback.assert_called_once_with("ui error", ErrorSeverity.CRITICAL)


def test_info_and_warning_skip_ui_callback():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger, Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(ValueError("fyi"), ErrorSeverity.INFO)
    handler.handle(ValueError("careful"), ErrorSeverity.WARNING)

    callback.assert_not_called()
    logger.info.assert_called_once()
    logger.warning.assert_called_once()


def test_ui_callback_gets_headline_for_crop_errors():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(EncodeFailedError("Encoder produced an empty payload"))

    callback.assert_called_once_with(
        "The cropped image could not be saved as JPEG: Encoder produced an empty payload",
        ErrorSeverity.ERROR,
    )


def test_user_message_walks_error_hierarchy():
    class SlowLoad(ImageLoadError):
        pass

    assert user_message(SlowLoad("timeout")) == "The image could not be loaded: timeout"
    assert user_message(ImageLoadError()) == "The image could not be loaded"
    assert user_message(KeyError("x")) == "'x'"
