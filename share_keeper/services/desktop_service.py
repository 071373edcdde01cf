"""Desktop integration hooks"""

import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union

from share_keeper.logging_config import get_logger

logger = get_logger(__name__)

OPEN_COMMANDS = ["xdg-open", "gnome-open", "open"]


class DesktopIntegration:
    """Startup hooks into the desktop environment.

    The launcher, autostart and bookmark hooks do nothing here; platform
    specific subclasses override them. They are called once at startup and
    never see the sync state.
    """

    def install_launcher(self) -> None:
        pass

    def enable_autostart(self) -> None:
        pass

    def add_to_bookmarks(self, path: Union[str, Path]) -> None:
        pass

    def find_open_command(self) -> Optional[str]:
        for command in OPEN_COMMANDS:
            if shutil.which(command):
                return command
        return None

    def open_folder(self, path: Union[str, Path]) -> bool:
        """Open a folder in the file manager. Returns False if no opener exists."""
        command = self.find_open_command()
        if command is None:
            logger.debug("No command found to open folders")
            return False

        try:
            subprocess.Popen([command, str(path)])
        except OSError as e:
            logger.warning(f"Could not open '{path}': {e}")
            return False
        return True
