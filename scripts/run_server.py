import os
import sys
import hydra
import uvicorn
from omegaconf import DictConfig

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.common.config.manager import ConfigManager
from src.common.logging import setup_logger, set_level
from src.signals.application.builder import SignalApplicationBuilder
from src.signals.presentation.api import app, configure

logger = setup_logger("src.run_server")

@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    signals_cfg = ConfigManager().merge(cfg.signals)
    set_level(signals_cfg.log_level)
    logger.info("Configuration loaded.")

    builder = SignalApplicationBuilder(signals_cfg).build_all()
    configure(builder)

    server_cfg = signals_cfg.server
    logger.info(f"Starting server at http://{server_cfg.host}:{server_cfg.port}")
    uvicorn.run(app, host=server_cfg.host, port=server_cfg.port)

if __name__ == "__main__":
    main()
