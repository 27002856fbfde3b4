# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from qcq_lib.core.config import CFG
from qcq_lib.core.error import StatusParseError
from qcq_lib.core.logger import get_logger

logger = get_logger(__name__)


def parseQstatTable(text: str) -> set[str]:
    """
    Parse the table printed by `qstat -u` into a set of job IDs.

    Every line up to and including the divider row is skipped, so output
    without the divider (no jobs) yields an empty set. The job ID is the
    first field of each row. Only whitespace lines at the end of the output
    are ignored; a blank line between rows is a malformed row.

    Example input:

        pbs:
                                                                    Req'd  Req'd   Elap
        Job ID          Username Queue    Jobname    SessID NDS TSK Memory Time  S Time
        --------------- -------- -------- ---------- ------ --- --- ------ ----- - -----
        1234.pbs        user     workq    main0.pbs   12345   1   1    8gb 1000: R 00:01

    Returns:
        set[str]: IDs of the listed jobs.

    Raises:
        StatusParseError: If a row does not have `CFG.pbs.qstat_columns` fields.
    """
    rows: list[str] = []
    in_table = False

    for line in text.splitlines():
        if not in_table:
            in_table = CFG.pbs.divider in line
            continue
        rows.append(line)

    # qstat may end its output with whitespace lines
    while rows and not rows[-1].strip():
        rows.pop()

    job_ids: set[str] = set()
    for line in rows:
        fields = line.split()
        if len(fields) != CFG.pbs.qstat_columns:
            raise StatusParseError(
                f"Expected {CFG.pbs.qstat_columns} fields in a qstat row, found {len(fields)}: '{line.strip()}'."
            )
        job_ids.add(fields[0])

    logger.debug(f"Detected {len(job_ids)} active jobs.")
    return job_ids
