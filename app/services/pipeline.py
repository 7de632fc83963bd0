"""
Pipeline wiring - event bus with its subscribers, and the derivation engine on top
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from app.events import EventBus, CheckInRecorded, CheckOutRecorded
from app.services.classifier_service import ClassifierService
from app.services.notification_service import NotificationService
from app.services.derivation_service import AttendanceDerivationService


def build_event_bus(
    classifier: Optional[ClassifierService] = None,
    notifier: Optional[NotificationService] = None
) -> EventBus:
    """Classifier first, so notifications see a classified record"""
    classifier = classifier if classifier is not None else ClassifierService()
    bus = EventBus()
    bus.subscribe(CheckInRecorded, classifier.on_check_in)
    bus.subscribe(CheckOutRecorded, classifier.on_check_out)
    if notifier is not None:
        bus.subscribe(CheckInRecorded, notifier.on_check_in)
        bus.subscribe(CheckOutRecorded, notifier.on_check_out)
    return bus


notification_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="notify")
event_bus = build_event_bus(notifier=NotificationService(executor=notification_executor))
derivation_service = AttendanceDerivationService(bus=event_bus)
