from qtrun.core.constants import HR_DRIFT_HEAD_END, HR_DRIFT_MIN_SAMPLES, HR_DRIFT_TAIL_START


def calculate_hr_drift(hr_samples: list[float]) -> float:
    """Percent change in HR between the first and last 10% of an activity.

    Positive values mean heart rate rose over the session (cardiovascular
    drift). Returns 0.0 with fewer than 10 samples or a zero opening HR.
    """
    n = len(hr_samples)
    if n < HR_DRIFT_MIN_SAMPLES:
        return 0.0

    first_segment = hr_samples[: int(n * HR_DRIFT_HEAD_END)]
    last_segment = hr_samples[int(n * HR_DRIFT_TAIL_START):]

    avg_first = sum(first_segment) / len(first_segment)
    avg_last = sum(last_segment) / len(last_segment)

    if avg_first <= 0:
        return 0.0
    return ((avg_last - avg_first) / avg_first) * 100
