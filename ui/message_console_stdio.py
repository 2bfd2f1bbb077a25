# ui/message_console_stdio.py
import sys
import threading

QUIT_COMMANDS = {"quit", "exit"}


class MessageConsole_stdio:
    """
    Terminal console with the same surface as the tk console.
    Output arrives from the worker thread; input is read on the main thread in run().
    """

    def __init__(self, stream_in=None, stream_out=None):
        self.stream_in = stream_in or sys.stdin
        self.stream_out = stream_out or sys.stdout
        self._print_lock = threading.Lock()
        self._input_ready = threading.Event()
        self.input_callback = None

    def print_message(self, sender: str, message: str):
        is_player = sender and sender.lower() in ["user", "player"]
        with self._print_lock:
            self.stream_out.write(f"> {message}\n" if is_player else f"{message}\n\n")
            self.stream_out.flush()

    def safe_print(self, sender, message):
        self.print_message(sender, message)

    def show_image(self, caption: str, url: str):
        if url:
            self.print_message("System", f"[picture{': ' + caption if caption else ''}]")

    def wait_for_input(self, on_input_received):
        self.input_callback = on_input_received
        self._input_ready.set()

    def start_spinner(self):
        pass

    def stop_spinner(self):
        pass

    def run(self):
        while True:
            self._input_ready.wait()
            self._input_ready.clear()
            cb, self.input_callback = self.input_callback, None

            with self._print_lock:
                self.stream_out.write("> ")
                self.stream_out.flush()
            line = self.stream_in.readline()
            if not line or line.strip().lower() in QUIT_COMMANDS:
                break
            cb(line.rstrip("\n"))
