# main.py
import argparse
import shutil
import threading

from ai.chat_engine import ChatEngine
from ai.content_service import ContentGenerationService
from ai.image_fetcher import ImageFetcher
from core.app_context import AppContext
from core.main_controller import MainController
from core.session_machine import SessionMachine
from infra.logging import get_logger, set_debug_enabled
from infra.path_helper import get_data_path, get_resource_path

log = get_logger("Main")


def build_context(ui, api_key_path, debug: bool = False, model_level: str = "medium") -> AppContext:
    engine = ChatEngine(api_key_path=api_key_path, debug=debug)
    service = ContentGenerationService(engine, ImageFetcher(engine), model_level=model_level)
    machine = SessionMachine(service)
    return AppContext(engine=engine, ui=ui, service=service, machine=machine)


def clean_temp_folder():
    temp_path = get_data_path("temp")
    temp_path.mkdir(parents=True, exist_ok=True)

    for item in temp_path.iterdir():
        try:
            if item.is_dir():
                shutil.rmtree(item, ignore_errors=True)
            else:
                item.unlink(missing_ok=True)
        except OSError as e:
            log.warning(f"[Temp Clean] failed to remove {item}: {e}")


def run_loop(ui, controller: MainController, player_input: str | None = None):
    """
    One controller step per user input, on a worker thread so the UI stays
    responsive while generation calls are in flight.
    """
    def loop():
        try:
            if player_input is None:
                output = controller.opening()
            else:
                output = controller.step(player_input)
        except Exception as e:
            log.exception(f"[Loop] step failed: {e}")
            output = "Something went wrong on my side. Type 'restart' to start over."

        ui.safe_print("System", output)
        ui.wait_for_input(lambda text: run_loop(ui, controller, text))

    ui.start_spinner()
    threading.Thread(target=loop, daemon=True).start()


def init_app(ui, args):
    api_key_path = args.api_key_file or get_resource_path("resources/api_key.txt")
    try:
        ctx = build_context(ui, api_key_path, debug=args.debug, model_level=args.model_level)
    except ValueError as e:
        log.error(f"Startup failed: {e}")
        ui.safe_print("System", f"{e}\nRestart the app once the key is in place.")
        return

    if args.debug:
        ui.safe_print("System", "[Debug] debug mode enabled")
    run_loop(ui, MainController(ctx))


def main():
    parser = argparse.ArgumentParser(description="Becom.AI dream explorer")
    parser.add_argument("--debug", action="store_true", help="verbose logs and chatlog dumps")
    parser.add_argument("--ui", choices=["tk", "stdio"], default="tk", help="UI to use (tk/stdio)")
    parser.add_argument("--api-key-file", default=None, help="file holding the OpenAI API key")
    parser.add_argument("--model-level", choices=["low", "medium", "high"], default="medium")
    args = parser.parse_args()
    set_debug_enabled(args.debug)

    clean_temp_folder()

    if args.ui == "tk":
        from ui.message_console_tk import MessageConsole_tk
        ui = MessageConsole_tk()
        ui.root.after(0, lambda: init_app(ui, args))
    else:
        from ui.message_console_stdio import MessageConsole_stdio
        ui = MessageConsole_stdio()
        init_app(ui, args)

    ui.run()


if __name__ == "__main__":
    main()
