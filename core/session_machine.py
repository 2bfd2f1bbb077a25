# core/session_machine.py
import threading

from ai.errors import InvalidInput
from core.creative_input import CreativeInput
from core.events import (
    BackToGrowthMap,
    ChooseAction,
    CompleteMission,
    RequestPlan,
    SelectCareer,
    StartOver,
    SubmitAge,
    SubmitDream,
)
from core.session import (
    MAX_AGE,
    MIN_AGE,
    Session,
    Stage,
    advance,
    back_to_growth_map,
    fail,
    initial_session,
    merge_unlocked_skills,
    reject,
)
from infra.logging import get_logger

log = get_logger("SessionMachine")

# the only stage each event is accepted from
ACCEPTED_STAGES = {
    SubmitAge: {Stage.AGE_INPUT},
    SubmitDream: {Stage.DREAM_INPUT},
    SelectCareer: {Stage.RESULTS},
    ChooseAction: {Stage.IN_STORY},
    CompleteMission: {Stage.IN_MISSION},
    RequestPlan: {Stage.CONCLUDING},
    BackToGrowthMap: {Stage.IN_STORY, Stage.IN_MISSION, Stage.CONCLUDING, Stage.PLAN_DISPLAY},
}

START_OVER_MESSAGE = "Please start over and provide an age."


class SessionMachine:
    """
    Owns the Session snapshot. Every transition builds a new Session and
    swaps it in; listeners are told about each committed snapshot.

    Stage-advancing events commit a loading stage, call the content service,
    then commit either the next stage or ERROR.
    """

    def __init__(self, service, session: Session | None = None):
        self.service = service
        self._session = session or initial_session()
        self._listeners = []
        self._lock = threading.Lock()
        self._epoch = 0
        self._handlers = {
            SubmitAge: self._on_submit_age,
            SubmitDream: self._on_submit_dream,
            SelectCareer: self._on_select_career,
            ChooseAction: self._on_choose_action,
            CompleteMission: self._on_complete_mission,
            RequestPlan: self._on_request_plan,
            BackToGrowthMap: self._on_back_to_growth_map,
        }

    @property
    def session(self) -> Session:
        return self._session

    def subscribe(self, listener):
        self._listeners.append(listener)

    def dispatch(self, event) -> Session:
        if isinstance(event, StartOver):
            with self._lock:
                # a call still in flight will find the epoch moved and drop its result
                self._epoch += 1
            log.info(f"[StartOver] from {self.session.stage.value}")
            self._commit(initial_session())
            return self.session

        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unknown event: {event!r}")

        stage = self.session.stage
        if stage not in ACCEPTED_STAGES[type(event)]:
            log.warning(f"[Ignored] {type(event).__name__} is not accepted in {stage.value}")
            return self.session

        handler(event)
        return self.session

    # ---------- plumbing ----------

    def _commit(self, session: Session, epoch: int | None = None) -> bool:
        with self._lock:
            if epoch is not None and epoch != self._epoch:
                log.info(f"[Discard] result for {session.stage.value} arrived after a reset")
                return False
            previous = self._session
            self._session = session
        if previous.stage != session.stage:
            log.info(f"[Stage] {previous.stage.value} -> {session.stage.value}")
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception as e:
                log.exception(f"[Listener] failed: {e}")
        return True

    def _guard_failure(self, reason: str, message: str = START_OVER_MESSAGE):
        log.error(f"[Guard] {reason} (stage={self.session.stage.value})")
        self._commit(fail(self.session, message))

    def _run(self, loading_stage: Stage, call, on_success, default_message: str,
             input_stage: Stage | None = None, **loading_changes):
        with self._lock:
            epoch = self._epoch
        self._commit(advance(self.session, loading_stage, **loading_changes))

        try:
            result = call()
        except InvalidInput as e:
            log.warning(f"[{loading_stage.value}] invalid input: {e}")
            message = e.user_message or default_message
            if input_stage is not None:
                self._commit(reject(advance(self.session, input_stage), message), epoch)
            else:
                self._commit(fail(self.session, message), epoch)
            return
        except Exception as e:
            log.exception(f"[{loading_stage.value}] {default_message} {e}")
            message = getattr(e, "user_message", None) or default_message
            self._commit(fail(self.session, message), epoch)
            return

        self._commit(on_success(self.session, result), epoch)

    # ---------- transitions ----------

    def _on_submit_age(self, event: SubmitAge):
        age = event.age
        if isinstance(age, bool) or not isinstance(age, int) or not (MIN_AGE <= age <= MAX_AGE):
            self._commit(reject(self.session, f"Please enter an age between {MIN_AGE} and {MAX_AGE}."))
            return
        self._commit(advance(self.session, Stage.DREAM_INPUT, age=age))

    def _on_submit_dream(self, event: SubmitDream):
        s = self.session
        if s.age is None:
            return self._guard_failure("dream submitted without an age")

        capture = CreativeInput(event.text or "", event.drawing)
        try:
            capture.validate()
        except InvalidInput as e:
            self._commit(reject(s, e.user_message))
            return

        self._run(
            Stage.ANALYZING,
            lambda: self.service.analyze_dream(capture.text, capture.drawing_image, s.age),
            lambda session, analysis: advance(session, Stage.RESULTS, analysis=analysis),
            "Analysis failed.",
            input_stage=Stage.DREAM_INPUT,
        )

    def _on_select_career(self, event: SelectCareer):
        s = self.session
        if s.age is None:
            return self._guard_failure("career selected without an age")
        if s.analysis is None:
            return self._guard_failure("career selected without an analysis")
        if not 0 <= event.index < len(s.analysis.career_paths):
            self._commit(reject(s, "Please pick one of the listed careers."))
            return

        career = s.analysis.career_paths[event.index]
        self._run(
            Stage.SIMULATING,
            lambda: self.service.start_simulation(career.name, s.age),
            lambda session, step: advance(session, Stage.IN_STORY, story_step=step),
            "Could not start the simulation.",
            selected_career=career,
        )

    def _on_choose_action(self, event: ChooseAction):
        s = self.session
        if s.age is None or s.selected_career is None:
            return self._guard_failure("story choice without age or career")
        if s.story_step is None:
            return self._guard_failure("story choice without a story step")
        if not 0 <= event.index < len(s.story_step.choices):
            self._commit(reject(s, "Please pick one of the choices."))
            return

        choice = s.story_step.choices[event.index]
        career = s.selected_career
        self._run(
            Stage.MISSION_LOADING,
            lambda: self.service.generate_mini_mission(career.name, choice.text, s.age),
            lambda session, mission: advance(session, Stage.IN_MISSION, mission=mission),
            "Could not create a mini-mission.",
            user_choice=choice,
        )

    def _on_complete_mission(self, event: CompleteMission):
        s = self.session
        if s.age is None or s.selected_career is None or s.user_choice is None:
            return self._guard_failure("mission completed without age, career or choice")

        results = list(event.results)
        career = s.selected_career

        def on_success(session: Session, conclusion) -> Session:
            concluded = advance(session, Stage.CONCLUDING, conclusion=conclusion)
            return merge_unlocked_skills(concluded, conclusion.unlocked_skills)

        # the conclusion reuses the simulation loader
        self._run(
            Stage.SIMULATING,
            lambda: self.service.get_mission_feedback(career.name, s.user_choice.text, results, s.age),
            on_success,
            "Could not get the simulation conclusion.",
        )

    def _on_request_plan(self, event: RequestPlan):
        s = self.session
        if s.age is None or s.selected_career is None:
            return self._guard_failure("plan requested without age or career")
        if s.analysis is None:
            return self._guard_failure("plan requested without an analysis")

        career = s.selected_career
        traits = list(s.analysis.traits)
        self._run(
            Stage.PLANNER_LOADING,
            lambda: self.service.generate_real_world_plan(career.name, traits, s.age),
            lambda session, plan: advance(session, Stage.PLAN_DISPLAY, plan=plan),
            "Could not generate your action plan.",
        )

    def _on_back_to_growth_map(self, event: BackToGrowthMap):
        if self.session.analysis is None:
            return self._guard_failure("back to growth map without an analysis")
        self._commit(back_to_growth_map(self.session))
