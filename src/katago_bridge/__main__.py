from katago_bridge.cli.main import entry_point

entry_point()
