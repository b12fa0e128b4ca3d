"""
performance - Parallel execution for the mission-design workloads

    parallel  - Process-pool fan-out of the two embarrassingly parallel
                computations: per-station pass scans and porkchop grid rows.
                Every task is a pure function of its arguments, so the
                parallel result is identical to the sequential one.
"""
