#!/usr/bin/env python3
"""
Sample data generator for testing the Biosignal Viewer application.

Generates synthetic exports in every supported dialect:
- Chest-strap ECG, accelerometer, heart rate and RR interval files
- A smartwatch ECG sample export with metadata header
"""

import argparse
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pandas as pd


ECG_HEADER = ["Phone timestamp", "sensor timestamp [ns]", "timestamp [ms]", "ecg [uV]"]
ACC_HEADER = ["Phone timestamp", "sensor timestamp [ns]", "X [mg]", "Y [mg]", "Z [mg]"]
HR_HEADER = ["Phone timestamp", "HR [bpm]"]
RR_HEADER = ["Phone timestamp", "RR-interval [ms]"]

START_TIME = datetime(2024, 5, 1, 9, 30, 0)


def generate_noise(size: int, scale: float = 0.1) -> np.ndarray:
    """Generate random noise."""
    return np.random.normal(0, scale, size)


def synthetic_ecg(t: np.ndarray, heart_rate_bpm: float = 60.0) -> np.ndarray:
    """Crude ECG trace in microvolts: a narrow R peak per beat plus a T wave."""
    beat_period = 60.0 / heart_rate_bpm
    phase = np.mod(t, beat_period) / beat_period
    r_peak = 1200 * np.exp(-((phase - 0.3) / 0.012) ** 2)
    t_wave = 250 * np.exp(-((phase - 0.6) / 0.05) ** 2)
    return r_peak + t_wave + generate_noise(len(t), 15)


def phone_timestamps(t: np.ndarray) -> list[str]:
    """Format seconds since START_TIME as phone timestamps."""
    return [
        (START_TIME + timedelta(seconds=float(s))).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
        for s in t
    ]


def write_chest_strap(output_path: Path, df: pd.DataFrame):
    """Write a semicolon-delimited chest-strap export."""
    df.to_csv(output_path, sep=";", index=False)
    print(f"Generated: {output_path} ({len(df)} rows, {len(df.columns)} columns)")


def generate_chest_strap_ecg(output_path: Path, duration_s: float = 60.0, rate_hz: float = 130.0):
    """Generate a chest-strap ECG export (microvolts)."""
    t = np.arange(0, duration_s, 1.0 / rate_hz)
    sensor_ns = (t * 1e9).astype(np.int64) + 599_000_000_000_000_000
    df = pd.DataFrame({
        ECG_HEADER[0]: phone_timestamps(t),
        ECG_HEADER[1]: sensor_ns,
        ECG_HEADER[2]: np.round(t * 1000).astype(np.int64),
        ECG_HEADER[3]: np.round(synthetic_ecg(t)).astype(np.int64),
    })
    write_chest_strap(output_path, df)


def generate_chest_strap_acc(output_path: Path, duration_s: float = 60.0, rate_hz: float = 50.0):
    """Generate a chest-strap accelerometer export (milli-g)."""
    t = np.arange(0, duration_s, 1.0 / rate_hz)
    n = len(t)
    sensor_ns = (t * 1e9).astype(np.int64) + 599_000_000_000_000_000
    df = pd.DataFrame({
        ACC_HEADER[0]: phone_timestamps(t),
        ACC_HEADER[1]: sensor_ns,
        ACC_HEADER[2]: np.round(40 * np.sin(2 * np.pi * 1.0 * t) + generate_noise(n, 5)).astype(np.int64),
        ACC_HEADER[3]: np.round(-990 + 20 * np.sin(2 * np.pi * 0.5 * t) + generate_noise(n, 5)).astype(np.int64),
        ACC_HEADER[4]: np.round(60 + 15 * np.cos(2 * np.pi * 1.0 * t) + generate_noise(n, 5)).astype(np.int64),
    })
    write_chest_strap(output_path, df)


def generate_chest_strap_hr(output_path: Path, duration_s: float = 60.0):
    """Generate a chest-strap heart rate export, one value per second."""
    t = np.arange(0, duration_s, 1.0)
    hr = 62 + 6 * np.sin(2 * np.pi * t / 30) + generate_noise(len(t), 1)
    df = pd.DataFrame({
        HR_HEADER[0]: phone_timestamps(t),
        HR_HEADER[1]: np.round(hr).astype(np.int64),
    })
    write_chest_strap(output_path, df)


def generate_chest_strap_rr(output_path: Path, duration_s: float = 60.0):
    """Generate a chest-strap RR interval export, one row per beat."""
    intervals_ms = []
    elapsed = 0.0
    while elapsed < duration_s:
        interval = 1000 + 60 * np.sin(2 * np.pi * elapsed / 10) + np.random.normal(0, 15)
        intervals_ms.append(int(round(interval)))
        elapsed += interval / 1000

    t = np.cumsum(intervals_ms) / 1000
    df = pd.DataFrame({
        RR_HEADER[0]: phone_timestamps(t),
        RR_HEADER[1]: intervals_ms,
    })
    write_chest_strap(output_path, df)


def generate_smartwatch_export(
    output_path: Path,
    duration_s: float = 30.0,
    rate_hz: float = 512.0,
    subject: str = "Jane Doe",
    birth_date: str = "1985-03-14"
):
    """
    Generate a smartwatch ECG sample export.

    Samples are written in millivolts with a comma decimal separator.
    """
    t = np.arange(0, duration_s, 1.0 / rate_hz)
    samples_mv = synthetic_ecg(t, heart_rate_bpm=72.0) / 1000

    lines = [
        f"Name,{subject}",
        f"Date of Birth,{birth_date}",
        "Recorded Date,2024-05-01 09:30:00",
        "Classification,Sinus Rhythm",
        "Symptoms,",
        "Software Version,1.90",
        "Device,Watch7,1",
        f"Sample Rate,{rate_hz * 1000:.0f} hertz",
        "",
        "",
        "Lead,Lead I",
        "Unit,mV",
    ]
    lines.extend(f"{value:.3f}".replace(".", ",") for value in samples_mv)

    output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    print(f"Generated: {output_path} ({len(samples_mv)} samples at {rate_hz} Hz)")


def generate_unrecognized(output_path: Path):
    """Generate a file no parser accepts."""
    output_path.write_text("time,value\n0,1\n1,2\n", encoding="utf-8")
    print(f"Generated: {output_path} (unrecognized format)")


def main():
    parser = argparse.ArgumentParser(description="Generate sample exports for Biosignal Viewer")
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("sample_data"),
        help="Output directory for generated files"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Recording length in seconds"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible noise"
    )

    args = parser.parse_args()

    if args.seed is not None:
        np.random.seed(args.seed)

    # Create output directory
    args.output_dir.mkdir(parents=True, exist_ok=True)

    generate_chest_strap_ecg(args.output_dir / "chest_strap_ecg.txt", args.duration)
    generate_chest_strap_acc(args.output_dir / "chest_strap_acc.txt", args.duration)
    generate_chest_strap_hr(args.output_dir / "chest_strap_hr.txt", args.duration)
    generate_chest_strap_rr(args.output_dir / "chest_strap_rr.txt", args.duration)
    generate_smartwatch_export(args.output_dir / "smartwatch_ecg.csv", min(args.duration, 30.0))
    generate_unrecognized(args.output_dir / "unrecognized.csv")

    print(f"\nAll files generated in: {args.output_dir.absolute()}")
    print("\nUsage guide:")
    print("1. Start the viewer: biosignal-viewer sample_data/*")
    print("2. Or use File > Add Data From File... to load them one by one")
    print("3. 'unrecognized.csv' should load no channels and show a status message")


if __name__ == "__main__":
    main()
