from katago_bridge.engine.command import build_analysis_command
from katago_bridge.engine.supervisor import EngineProcess, launch

__all__ = ["EngineProcess", "build_analysis_command", "launch"]
