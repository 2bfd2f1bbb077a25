# core/app_context.py

class AppContext:
    def __init__(self, engine, ui, service, machine):
        self.engine = engine
        self.ui = ui
        self.service = service
        self.machine = machine
        # view-side state of the mission currently being played
        self.mission_play = None
