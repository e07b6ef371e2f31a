import os
import csv
from datetime import datetime
import pandas as pd

from bboselect.utils.logging.logger import logger


class SelectionLogger:
    """
    Logger for the candidate selection step of a BO run.
    Handles:
    - start of run logging
    - one row per selection round (success or failure reason)
    - export of every selected batch at the end
    """

    def __init__(self, log_dir="analysis/data/selection/logs"):
        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)

        # Shared BBO console logger
        self.logger = logger

        self.csv_path = None   # will be filled in start
        self.active = False
        self.batches = []

    # -----------------------------------------------------
    # Start of run logging
    # -----------------------------------------------------
    def log_start(self, config, prefix="selection"):
        """
        Create a CSV file and write the header for the selection rounds.
        """
        run_name = config.get("name", "unnamed_run")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        filename = f"{prefix}_{run_name}_{timestamp}.csv"
        self.csv_path = os.path.join(self.log_dir, filename)

        with open(self.csv_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "round",
                "run_new",
                "status",
                "reason",
                "n_selected",
                "n_optima",
                "n_noise",
                "best_utility",
            ])

        self.active = True
        self.logger.info(f"Selection logging started → {self.csv_path}")

    # -----------------------------------------------------
    # Log a single selection round
    # -----------------------------------------------------
    def log_round(self, i, run_new, result):
        """
        Log the outcome of select_candidates into CSV + console.
        """
        if not self.active:
            raise RuntimeError("log_round called before log_start")

        if result.ok:
            batch = result.batch
            n_optima = int(batch["acq_optimum"].sum())
            row = [i + 1, run_new, "ok", "", len(batch), n_optima,
                   len(batch) - n_optima, float(batch["gp_utility"].max())]
            self.batches.append(batch.assign(round=i + 1))
            self.logger.info(
                f"Round {i+1} | Selected:{len(batch)}/{run_new} | "
                f"Optima:{n_optima} | Noise:{len(batch) - n_optima}"
            )
        else:
            row = [i + 1, run_new, "failed", result.reason.value, 0, 0, 0, ""]
            self.logger.warning(f"Round {i+1} | Selection failed: {result.reason.value}")

        with open(self.csv_path, "a", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(row)

    # -----------------------------------------------------
    # Log all selected batches at end of run
    # -----------------------------------------------------
    def log_save_batches(self, prefix="selection"):
        if not self.batches:
            self.logger.info("No batches to save")
            return None

        short_id = datetime.now().strftime("%b%d_%y_%H%M%S").lower()
        filename = f"{prefix}_batches_{short_id}.csv"
        out_path = os.path.join(self.log_dir, filename)

        df = pd.concat(self.batches, ignore_index=True)
        df.to_csv(out_path, index=False)

        self.logger.info(f"All batches saved → {out_path}")
        return out_path
