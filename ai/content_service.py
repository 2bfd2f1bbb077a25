# ai/content_service.py
import base64
import random
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from urllib.parse import quote

from ai import prompts
from ai.errors import GenerationError, InvalidInput, SchemaViolation
from ai.image_fetcher import ImageFetcher
from ai.schemas import (
    ANALYSIS_SCHEMA,
    CONCLUSION_SCHEMA,
    CONTRACT_MODELS,
    MISSION_SCHEMA,
    PLAN_SCHEMA,
    STORY_SCHEMA,
    RoundDesign,
    validate_contract,
)
from core.models import (
    AnalysisResult,
    CareerPath,
    CoachingPoint,
    Conclusion,
    GameMode,
    GridObject,
    GrowthMap,
    GrowthMapNode,
    IconKey,
    Mission,
    ParentMessage,
    PlanSuggestion,
    RealWorldPlan,
    Round,
    RoundResult,
    StoryChoice,
    StoryStep,
    unique_in_order,
)
from infra.logging import get_operation_logger

IMAGE_SPACING_SECONDS = 0.5
KHAN_SEARCH_MARKER = "search?page_search_query="
KHAN_SEARCH_URL = "https://www.khanacademy.org/search?page_search_query={query}"


def _image_mime(data: bytes) -> str:
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def normalize_course_url(suggestion: PlanSuggestion) -> PlanSuggestion:
    """Khan Academy links are only trusted when they are search URLs; rebuild anything else from the title."""
    platform = (suggestion.platform or "").lower()
    if "khan" in platform and KHAN_SEARCH_MARKER not in suggestion.url:
        url = KHAN_SEARCH_URL.format(query=quote(suggestion.title, safe=""))
        return PlanSuggestion(suggestion.title, suggestion.description, url, suggestion.platform)
    return suggestion


class ContentGenerationService:
    """
    The five generation steps of a session:
    analyze_dream -> start_simulation -> generate_mini_mission
    -> get_mission_feedback -> generate_real_world_plan

    Each builds its prompts, calls the engine with a json_schema contract,
    validates the answer, then attaches illustrations via ImageFetcher.
    """

    def __init__(
        self,
        engine,
        image_fetcher: ImageFetcher | None = None,
        sleep=time.sleep,
        rng: random.Random | None = None,
        model_level: str = "medium",
    ):
        self.engine = engine
        self.images = image_fetcher or ImageFetcher(engine, sleep=sleep)
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.model_level = model_level

    # ---------- common ----------

    @contextmanager
    def _operation(self, name: str, user_message: str):
        olog = get_operation_logger("ContentService", name)
        olog.info("request start")
        try:
            yield olog
        except GenerationError as e:
            e.operation = e.operation or name
            if e.user_message is None:
                e.user_message = user_message
            olog.error(f"failed: {e}")
            raise
        except Exception as e:
            olog.exception(f"unexpected failure: {e}")
            raise GenerationError(f"{type(e).__name__}: {e}", operation=name, user_message=user_message) from e
        olog.info("request done")

    def _generate(self, operation: str, system: str, user_content, schema: dict, temperature: float):
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user_content},
        ]
        payload = self.engine.chat(
            messages=messages,
            caller_name=operation,
            model_level=self.model_level,
            schema=schema,
            temperature=temperature,
        )
        if not isinstance(payload, dict):
            raise SchemaViolation(f"expected a JSON object, got {type(payload).__name__}", operation=operation)
        return validate_contract(payload, CONTRACT_MODELS[schema["name"]], operation)

    def _fetch_sequential(self, requests: list[tuple[str, str]]) -> list[str]:
        urls = []
        for i, (prompt, aspect_ratio) in enumerate(requests):
            if i > 0:
                self._sleep(IMAGE_SPACING_SECONDS)
            urls.append(self.images.fetch(prompt, aspect_ratio))
        return urls

    # ---------- 1. dream analysis ----------

    def analyze_dream(self, dream_text: str, drawing: bytes | None, age: int) -> AnalysisResult:
        operation = "analyze_dream"
        with self._operation(operation, f"Failed to get analysis from {prompts.APP_NAME}.") as olog:
            has_text = bool(dream_text and dream_text.strip())
            has_drawing = bool(drawing)
            if not has_text and not has_drawing:
                raise InvalidInput(
                    "no input provided for analysis",
                    operation=operation,
                    user_message="Tell me about your dream or draw it first!",
                )

            parts = []
            if has_drawing:
                encoded = base64.b64encode(drawing).decode("ascii")
                parts.append({"type": "input_image", "image_url": f"data:{_image_mime(drawing)};base64,{encoded}"})
            parts.append({"type": "input_text", "text": prompts.analysis_user_prompt(dream_text or "", has_drawing)})

            analysis = self._generate(operation, prompts.analysis_system_prompt(age), parts, ANALYSIS_SCHEMA, 0.7)

            career_paths = []
            for i, path in enumerate(analysis.career_paths):
                if i > 0:
                    self._sleep(IMAGE_SPACING_SECONDS)
                image_url = self.images.fetch(prompts.career_image_prompt(path.name, age), "wide")
                career_paths.append(CareerPath(path.name, path.description, image_url))

            olog.info(f"{len(career_paths)} career paths, traits={analysis.traits}")
            return AnalysisResult(
                feedback=analysis.feedback,
                traits=unique_in_order(analysis.traits),
                career_paths=tuple(career_paths),
            )

    # ---------- 2. career simulation ----------

    def start_simulation(self, career_name: str, age: int) -> StoryStep:
        operation = "start_simulation"
        with self._operation(operation, f"Failed to start a story about being a {career_name}."):
            story = self._generate(
                operation,
                prompts.story_system_prompt(career_name, age),
                prompts.story_user_prompt(career_name, age),
                STORY_SCHEMA,
                0.8,
            )
            image_url = self.images.fetch(prompts.story_image_prompt(career_name, age, story.text), "wide")
            return StoryStep(
                text=story.text,
                choices=tuple(StoryChoice(c.text) for c in story.choices),
                image_url=image_url,
            )

    # ---------- 3. mini mission ----------

    def generate_mini_mission(self, career_name: str, choice: str, age: int) -> Mission:
        operation = "generate_mini_mission"
        with self._operation(operation, f"Failed to create a mini-mission for a {career_name}.") as olog:
            design = self._generate(
                operation,
                prompts.mission_system_prompt(career_name, choice, age),
                prompts.mission_user_prompt(career_name, choice),
                MISSION_SCHEMA,
                0.8,
            )

            distinct_types = unique_in_order(ot.type for rnd in design.rounds for ot in rnd.object_types)
            urls = self._fetch_sequential([(prompts.object_image_prompt(t), "square") for t in distinct_types])
            images = dict(zip(distinct_types, urls))
            olog.info(f"object images fetched for {len(distinct_types)} types")

            rounds = tuple(
                self._build_round(index, rnd, images)
                for index, rnd in enumerate(design.rounds, start=1)
            )
            return Mission(title=design.title, rounds=rounds)

    def _build_round(self, index: int, design: RoundDesign, images: dict[str, str]) -> Round:
        grid = []
        ordinals: dict[str, int] = {}
        for ot in design.object_types:
            for _ in range(ot.count):
                ordinals[ot.type] = ordinals.get(ot.type, 0) + 1
                grid.append(GridObject(f"{ot.type}#{ordinals[ot.type]}", ot.type, images.get(ot.type, "")))

        # Fisher-Yates, so the grid is not grouped by type
        self._rng.shuffle(grid)

        return Round(
            index=index,
            instructions=design.instructions,
            skill_label=design.skill_to_test,
            mode=GameMode(design.game_mode),
            grid_objects=tuple(grid),
            correct_object_ids=frozenset(o.id for o in grid if o.type == design.correct_object_type),
        )

    # ---------- 4. mission feedback ----------

    def get_mission_feedback(
        self, career_name: str, choice: str, round_results: list[RoundResult], age: int
    ) -> Conclusion:
        operation = "get_mission_feedback"
        with self._operation(operation, f"Failed to conclude the story for a {career_name}.") as olog:
            answer = self._generate(
                operation,
                prompts.feedback_system_prompt(career_name, age),
                prompts.feedback_user_prompt(career_name, choice, round_results),
                CONCLUSION_SCHEMA,
                0.7,
            )

            unlocked = self._succeeded_skills_only(answer.unlocked_skills, round_results, olog)
            image_url = self.images.fetch(prompts.conclusion_image_prompt(career_name, age, answer.text), "wide")
            return Conclusion(
                narrative_text=answer.text,
                feedback_title=answer.feedback_title,
                coaching_points=tuple(
                    CoachingPoint(fb.text, IconKey.from_keyword(fb.icon)) for fb in answer.coaching_feedback
                ),
                unlocked_skills=unlocked,
                image_url=image_url,
            )

    @staticmethod
    def _succeeded_skills_only(reported: list[str], round_results: list[RoundResult], olog) -> tuple[str, ...]:
        succeeded = {r.skill_label.strip().lower(): r.skill_label for r in round_results if r.success}
        kept = unique_in_order(
            succeeded[s.strip().lower()] for s in reported if s.strip().lower() in succeeded
        )
        dropped = [s for s in reported if s.strip().lower() not in succeeded]
        if dropped:
            olog.warning(f"backend reported skills from failed or unknown rounds, dropped: {dropped}")
        return kept


    # ---------- 5. real-world plan ----------

    def generate_real_world_plan(self, career_name: str, traits: list[str], age: int) -> RealWorldPlan:
        operation = "generate_real_world_plan"
        with self._operation(operation, f"Failed to create a real-world plan for a {career_name}.") as olog:
            plan = self._generate(
                operation,
                prompts.plan_system_prompt(career_name, age),
                prompts.plan_user_prompt(career_name, list(traits), age),
                PLAN_SCHEMA,
                0.7,
            )

            drafts = [plan.growth_map.central_career, *plan.growth_map.trait_nodes]
            # icons are independent of each other, so these go out together
            with ThreadPoolExecutor(max_workers=len(drafts)) as pool:
                urls = list(pool.map(
                    lambda node: self.images.fetch(prompts.growth_icon_prompt(node.image_prompt), "square"),
                    drafts,
                ))
            nodes = [GrowthMapNode(n.title, n.image_prompt, url) for n, url in zip(drafts, urls)]
            olog.info(f"growth map icons: {sum(1 for u in urls if u)}/{len(urls)} generated")

            courses = tuple(
                normalize_course_url(PlanSuggestion(c.title, c.description, c.url, c.platform))
                for c in plan.online_course_suggestions
            )
            return RealWorldPlan(
                title=plan.plan_title,
                video_suggestions=tuple(
                    PlanSuggestion(s.title, s.description, s.url) for s in plan.youtube_suggestions
                ),
                course_suggestions=courses,
                activity_suggestions=tuple(
                    PlanSuggestion(s.title, s.description, s.url) for s in plan.local_activity_suggestions
                ),
                growth_map=GrowthMap(central_node=nodes[0], trait_nodes=tuple(nodes[1:])),
                parent_message=ParentMessage(plan.parent_email.subject, plan.parent_email.body),
            )
