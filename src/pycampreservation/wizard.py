"""Step forms and the reservation wizard state machine."""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .api.catalog import CatalogApi
from .api.const import NETWORK_ERROR_MESSAGE, SUBMIT_FAILED_MESSAGE
from .api.reservations import ReservationsApi
from .assembler import assemble, compute_total
from .catalog.loader import CatalogKind, get_catalog_kind, load_catalog_kinds
from .catalog.reconciler import SelectionReconciler
from .catalog.transport import TransportReconciler, cities_differ
from .exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    ServerValidationError,
    ServiceUnavailableError,
    ValidationError,
)
from .field_errors import FieldErrorMapper, default_mapper, format_errors
from .models import CatalogResult, Reservation, ReservationItem, TransportCity
from .state import Reset, ReservationStore, SetCurrentStep, SetReservationNumber
from .steps import STEP_TYPES, Step2Data, StepData, step_from_dict
from .storage import STEP_KEYS, DraftStore
from .validation import ALL_CONSENTS, validate_step1, validate_step2, validate_step3, validate_step4

_LOGGER = logging.getLogger(__name__)

Errors = dict[str, str]
Validator = Callable[[Any], Errors]


class WizardState(enum.Enum):
    STEP1 = "step1"
    STEP2 = "step2"
    STEP3 = "step3"
    STEP4 = "step4"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    NETWORK_ERROR = "network_error"

    @property
    def step(self) -> int | None:
        return _STEP_NUMBERS.get(self)

    @classmethod
    def for_step(cls, step: int) -> WizardState:
        return _STATES_BY_STEP[step]


_STATES_BY_STEP = {
    1: WizardState.STEP1,
    2: WizardState.STEP2,
    3: WizardState.STEP3,
    4: WizardState.STEP4,
}
_STEP_NUMBERS = {state: step for step, state in _STATES_BY_STEP.items()}


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    state: WizardState
    reservation: Reservation | None = None
    field_errors: dict[int, Errors] = field(default_factory=dict)
    banner_messages: tuple[str, ...] = ()
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return self.state is WizardState.SUCCESS


def _set_path(target: Any, path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = _get_child(target, part, path)
    last = parts[-1]
    if isinstance(target, list):
        index = _list_index(target, last, path)
        target[index] = value
    elif isinstance(target, dict):
        target[last] = value
    elif dataclasses.is_dataclass(target) and last in {f.name for f in dataclasses.fields(target)}:
        setattr(target, last, value)
    else:
        raise ValidationError(f"Unknown field: {path}.")


def _get_child(target: Any, part: str, path: str) -> Any:
    if isinstance(target, list):
        return target[_list_index(target, part, path)]
    if isinstance(target, dict):
        if part not in target:
            raise ValidationError(f"Unknown field: {path}.")
        return target[part]
    if dataclasses.is_dataclass(target) and part in {f.name for f in dataclasses.fields(target)}:
        return getattr(target, part)
    raise ValidationError(f"Unknown field: {path}.")


def _list_index(target: list, part: str, path: str) -> int:
    if not part.isdigit() or int(part) >= len(target):
        raise ValidationError(f"Unknown field: {path}.")
    return int(part)


class StepForm:
    """Working copy of one step slice with its field errors.

    ``on_change`` fires only when the serialized slice differs from the last
    emitted one, so repeated identical updates do not trigger saves.
    """

    def __init__(
        self,
        step: int,
        initial: StepData | None = None,
        on_change: Callable[[StepData], None] | None = None,
        *,
        validator: Validator | None = None,
    ) -> None:
        if step not in STEP_TYPES:
            raise ValidationError(f"Unknown step: {step}.")
        self._step = step
        self._data: StepData = initial if initial is not None else STEP_TYPES[step]()
        self._on_change = on_change
        self._validator = validator
        self._errors: Errors = {}
        self._last_emitted: dict[str, Any] = self._data.to_dict()

    @property
    def step(self) -> int:
        return self._step

    @property
    def data(self) -> StepData:
        return self._data

    @property
    def errors(self) -> Errors:
        return dict(self._errors)

    def update(self, path: str, value: Any) -> None:
        _set_path(self._data, path, value)
        self._errors.pop(path, None)
        self._emit()

    def update_many(self, values: dict[str, Any]) -> None:
        """Set several fields and emit once."""
        for path, value in values.items():
            _set_path(self._data, path, value)
            self._errors.pop(path, None)
        self._emit()

    def replace(self, data: StepData) -> None:
        if not isinstance(data, STEP_TYPES[self._step]):
            raise ValidationError(f"Step {self._step} expects {STEP_TYPES[self._step].__name__}.")
        self._data = data
        self._errors = {}
        self._emit()

    def touch(self) -> None:
        """Emit after the slice was mutated in place, e.g. a guardian was appended."""
        self._emit()

    def validate(self) -> Errors:
        self._errors = self._validator(self._data) if self._validator is not None else {}
        return dict(self._errors)

    def set_errors(self, errors: dict[str, str]) -> None:
        self._errors = dict(errors)

    def _emit(self) -> None:
        snapshot = self._data.to_dict()
        if snapshot == self._last_emitted:
            return
        self._last_emitted = snapshot
        if self._on_change is not None:
            self._on_change(self._data)


class ReservationWizard:
    """Four-step reservation flow ending in a backend submission."""

    def __init__(
        self,
        reservations: ReservationsApi,
        drafts: DraftStore,
        store: ReservationStore,
        *,
        camp_id: int,
        property_id: int,
        camp_start_date: str | date | None = None,
        deposit_amount: float = 0,
        required_consents: Iterable[str] = ALL_CONSENTS,
        mapper: FieldErrorMapper | None = None,
    ) -> None:
        self._reservations = reservations
        self._drafts = drafts
        self._store = store
        self._camp_id = camp_id
        self._property_id = property_id
        self._camp_start_date = camp_start_date
        self._deposit_amount = deposit_amount
        self._required_consents = tuple(required_consents)
        self._mapper = mapper or default_mapper()
        self._reconcilers: dict[str, SelectionReconciler] = {}
        self._transport = TransportReconciler(store)
        self._forms: dict[int, StepForm] = {
            step: StepForm(
                step,
                self._load_draft(step),
                on_change=self._saver(step),
                validator=self._validator(step),
            )
            for step in STEP_TYPES
        }
        start = store.state.current_step
        self._state = WizardState.for_step(start if start in STEP_TYPES else 1)
        self._last_reservation: Reservation | None = None

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def current_step(self) -> int | None:
        return self._state.step

    @property
    def store(self) -> ReservationStore:
        return self._store

    @property
    def last_reservation(self) -> Reservation | None:
        return self._last_reservation

    def form(self, step: int) -> StepForm:
        if step not in self._forms:
            raise ValidationError(f"Unknown step: {step}.")
        return self._forms[step]

    @property
    def current_form(self) -> StepForm:
        step = self.current_step
        if step is None:
            raise ValidationError("Wizard is not on a form step.")
        return self._forms[step]

    # Catalog selections

    def reconciler(self, kind: str | CatalogKind) -> SelectionReconciler:
        catalog_kind = get_catalog_kind(kind)
        if catalog_kind.kind not in self._reconcilers:
            self._reconcilers[catalog_kind.kind] = SelectionReconciler(
                self._store,
                catalog_kind,
                drafts=self._drafts,
            )
        return self._reconcilers[catalog_kind.kind]

    async def load_catalogs(
        self,
        catalogs: CatalogApi,
        kinds: Iterable[str] | None = None,
    ) -> dict[str, CatalogResult]:
        """Fetch catalogs, restore the stored selections and rebuild their items."""
        names = list(kinds) if kinds is not None else [kind.kind for kind in load_catalog_kinds()]
        results: dict[str, CatalogResult] = {}
        for name in names:
            result = await catalogs.fetch(name, self._camp_id, self._property_id)
            reconciler = self.reconciler(name)
            reconciler.load_catalog(result)
            if not reconciler.is_initialized:
                reconciler.restore_selection()
            self._refresh_selection_fields(reconciler.kind)
            results[name] = result
        return results

    async def load_transport(self, catalogs: CatalogApi) -> list[TransportCity]:
        """Fetch the turnus transport and price the current transport choice.

        A turnus without transport, or one whose transport cannot be loaded,
        never carries a transport item.
        """
        cities: list[TransportCity] | None = None
        try:
            transport = await catalogs.transport(self._camp_id, self._property_id)
            if transport is not None:
                cities = await catalogs.transport_cities(self._camp_id, self._property_id)
        except (ApiError, AuthError, NetworkError) as exc:
            _LOGGER.warning("Loading transport failed: %s", exc)
            cities = None
        self._transport.load_cities(cities)
        data = self._forms[2].data
        before = data.transportData.differentCities
        self._sync_transport(data)
        if data.transportData.differentCities != before:
            self._save(2)
        return self._transport.cities

    def toggle(self, kind: str, entity_id: int) -> list[ReservationItem]:
        reconciler = self.reconciler(kind)
        items = reconciler.toggle(entity_id)
        self._refresh_selection_fields(reconciler.kind)
        return items

    def select(self, kind: str, entity_id: int | None) -> list[ReservationItem]:
        reconciler = self.reconciler(kind)
        items = reconciler.select(entity_id)
        self._refresh_selection_fields(reconciler.kind)
        return items

    def _refresh_selection_fields(self, kind: CatalogKind) -> None:
        # Copy the reconciler's draft fields into the working forms so a later
        # form save does not overwrite them. Each step is read once and
        # emitted once: a save after the first field would clobber the rest.
        fields_by_step: dict[str, list[str]] = {}
        for target in kind.drafts:
            fields_by_step.setdefault(target.step, []).append(target.field)
        for step_key, names in fields_by_step.items():
            raw = self._drafts.load_raw(step_key)
            if raw is None:
                continue
            step = STEP_KEYS[step_key]
            fresh = step_from_dict(step, raw)
            values = {name: getattr(fresh, name) for name in names if name in raw}
            if values:
                self._forms[step].update_many(values)

    # Navigation

    def next(self) -> Errors:
        """Validate the current step; on success save it and advance."""
        step = self._require_form_step()
        errors = self._forms[step].validate()
        if errors:
            _LOGGER.debug("Step %d blocked by %d errors", step, len(errors))
            return errors
        self._save(step)
        if step < 4:
            self._move_to(step + 1)
        return {}

    def back(self) -> None:
        step = self._require_form_step()
        if step > 1:
            self._move_to(step - 1)

    def go_to(self, target: int) -> Errors:
        """Jump to ``target``; moving forward validates every step in between."""
        if target not in STEP_TYPES:
            raise ValidationError(f"Unknown step: {target}.")
        step = self._require_form_step()
        for intermediate in range(step, target):
            errors = self._forms[intermediate].validate()
            if errors:
                self._move_to(intermediate)
                return errors
            self._save(intermediate)
        self._move_to(target)
        return {}

    def abandon(self) -> None:
        self._drafts.clear_all()
        self._reset_selections()
        self._store.dispatch(Reset(self._store.state.base_price))
        self._reset_forms()
        self._state = WizardState.STEP1

    # Submission

    async def submit(self) -> SubmissionResult:
        step = self._require_form_step()
        if step != 4:
            raise ValidationError("Submission is only possible from step 4.")
        local_errors: dict[int, Errors] = {}
        for number, form in self._forms.items():
            errors = form.validate()
            if errors:
                local_errors[number] = errors
        if local_errors:
            self._move_to(min(local_errors))
            return SubmissionResult(state=WizardState.VALIDATION_FAILED, field_errors=local_errors)

        payload = self.build_payload()
        self._state = WizardState.SUBMITTING
        _LOGGER.debug("Submitting reservation for camp %s property %s", self._camp_id, self._property_id)
        try:
            reservation = await self._reservations.create(payload)
        except ServerValidationError as exc:
            return self._handle_server_errors(exc)
        except (NetworkError, ServiceUnavailableError) as exc:
            _LOGGER.warning("Reservation submission failed: %s", exc)
            self._state = WizardState.STEP4
            return SubmissionResult(
                state=WizardState.NETWORK_ERROR,
                banner_messages=(exc.user_message or NETWORK_ERROR_MESSAGE,),
                retryable=True,
            )
        except ApiError as exc:
            _LOGGER.warning("Reservation submission rejected: %s", exc)
            self._state = WizardState.STEP4
            return SubmissionResult(
                state=WizardState.NETWORK_ERROR,
                banner_messages=(exc.user_message or SUBMIT_FAILED_MESSAGE,),
            )
        except AuthError:
            self._state = WizardState.STEP4
            raise

        self._last_reservation = reservation
        self._store.dispatch(Reset(self._store.state.base_price))
        self._store.dispatch(SetReservationNumber(reservation.reservation_number))
        self._drafts.clear_all()
        self._reset_selections()
        self._reset_forms()
        self._state = WizardState.SUCCESS
        _LOGGER.debug("Reservation %s created", reservation.id)
        return SubmissionResult(state=WizardState.SUCCESS, reservation=reservation)

    def build_payload(self) -> dict[str, Any]:
        state = self._store.state
        diets = state.items_of_type("diet")
        return assemble(
            self._forms[1].data,
            self._forms[2].data,
            self._forms[3].data,
            self._forms[4].data,
            self._camp_id,
            self._property_id,
            compute_total(state.items),
            self._deposit_amount,
            diet_label=diets[0].name if diets else None,
        )

    def _handle_server_errors(self, exc: ServerValidationError) -> SubmissionResult:
        mapped = self._mapper.map(exc.field_errors)
        for step, errors in mapped.by_step.items():
            self._forms[step].set_errors(errors)
        target = mapped.first_step or 4
        self._move_to(target)
        banners: tuple[str, ...] = ()
        if mapped.unmatched:
            banners = (format_errors(mapped.unmatched),)
        elif not mapped.by_step:
            banners = (exc.detail or str(exc),)
        _LOGGER.debug("Server rejected the reservation; returning to step %d", target)
        return SubmissionResult(
            state=WizardState.VALIDATION_FAILED,
            field_errors={step: dict(errors) for step, errors in mapped.by_step.items()},
            banner_messages=banners,
        )

    # Internals

    def _require_form_step(self) -> int:
        step = self._state.step
        if step is None:
            raise ValidationError(f"Wizard is not on a form step ({self._state.value}).")
        return step

    def _move_to(self, step: int) -> None:
        self._state = WizardState.for_step(step)
        self._store.dispatch(SetCurrentStep(step))

    def _save(self, step: int) -> None:
        self._drafts.save(f"step{step}", self._forms[step].data)

    def _saver(self, step: int) -> Callable[[StepData], None]:
        def save(data: StepData) -> None:
            if isinstance(data, Step2Data):
                self._sync_transport(data)
            self._drafts.save(f"step{step}", data)

        return save

    def _load_draft(self, step: int) -> StepData | None:
        return self._drafts.load(f"step{step}")

    def _reset_forms(self) -> None:
        for step, form in self._forms.items():
            form.replace(STEP_TYPES[step]())
        # Replacing emits saves; drop them again so nothing survives the reset.
        self._drafts.clear_all()

    def _reset_selections(self) -> None:
        for reconciler in self._reconcilers.values():
            reconciler.reset()

    def _sync_transport(self, data: Step2Data) -> None:
        # differentCities is derived from the legs, never entered.
        data.transportData.differentCities = cities_differ(data.transportData)
        self._transport.reconcile(data.transportData)

    def _validator(self, step: int) -> Validator:
        if step == 1:
            return lambda data: validate_step1(data, camp_start_date=self._start_date())
        if step == 2:
            return lambda data: validate_step2(data, promotion_name=self._promotion_name())
        if step == 3:
            return validate_step3
        return lambda data: validate_step4(data, required_consents=self._required_consents)

    def _start_date(self) -> str | date | None:
        if self._camp_start_date is not None:
            return self._camp_start_date
        camp = self._store.state.camp
        return camp.start_date if camp is not None and camp.start_date else None

    def _promotion_name(self) -> str | None:
        promotions = self._store.state.items_of_type("promotion")
        return promotions[0].name if promotions else None
