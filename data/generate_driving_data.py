"""
Generate a realistic fleet telemetry export with a mix of safe, average and risky drivers.
Outputs to data/driving_records.csv using the Korean column headers of the telematics export.
"""
import pandas as pd
import numpy as np
import random
import os

random.seed(42)
np.random.seed(42)

SURNAMES = ["김", "이", "박", "최", "정", "강", "조", "윤", "장", "임"]
GIVEN = ["민준", "서연", "지훈", "하은", "도윤", "수아", "예준", "지우", "현우", "유진"]

# Incidents per 100 km by driver profile
PROFILES = {
    "safe": {"share": 0.5, "speeding": 1.0, "accel": 0.8, "decel": 0.6, "stop": 0.2, "start": 0.4,
             "long_speeding": 0.1, "gear": 0.1, "violations": 0.02},
    "average": {"share": 0.35, "speeding": 5.0, "accel": 6.0, "decel": 3.0, "stop": 1.0, "start": 2.0,
                "long_speeding": 0.8, "gear": 0.5, "violations": 0.2},
    "risky": {"share": 0.15, "speeding": 25.0, "accel": 35.0, "decel": 15.0, "stop": 5.0, "start": 12.0,
              "long_speeding": 4.0, "gear": 2.0, "violations": 1.5},
}


def random_name():
    return random.choice(SURNAMES) + random.choice(GIVEN)


def generate_record(index, profile_name):
    profile = PROFILES[profile_name]
    distance = round(float(np.random.uniform(300, 3000)), 1)
    per_100 = distance / 100

    def incidents(rate):
        return int(np.random.poisson(rate * per_100))

    return {
        "차량번호": f"TS-2026-{index:03d}",
        "운전자명": random_name(),
        "운행일자": "2026-01-31",
        "운행거리(km)": distance,
        "운전시간(분)": int(distance / np.random.uniform(0.6, 1.0)),
        "최고속도(km/h)": int(np.random.uniform(90, 150)),
        "과속횟수": incidents(profile["speeding"]),
        "급가속횟수": incidents(profile["accel"]),
        "급감속횟수": incidents(profile["decel"]),
        "급정지횟수": incidents(profile["stop"]),
        "급출발횟수": incidents(profile["start"]),
        "장기과속시간(분)": incidents(profile["long_speeding"]),
        "정차중기어변속횟수": incidents(profile["gear"]),
        "연속운행위반횟수": incidents(profile["violations"]),
        "피로누적위험횟수": incidents(profile["violations"]),
        "음주운전의심횟수": incidents(profile["violations"] / 10),
        "휴식시간미준수횟수": incidents(profile["violations"]),
        "법규위반횟수": incidents(profile["violations"] * 2),
    }


def main(n_vehicles: int = 200):
    names = list(PROFILES)
    weights = [PROFILES[p]["share"] for p in names]
    profiles = random.choices(names, weights=weights, k=n_vehicles)

    df = pd.DataFrame([generate_record(i + 1, p) for i, p in enumerate(profiles)])

    output_dir = os.path.dirname(os.path.abspath(__file__))
    output_path = os.path.join(output_dir, "driving_records.csv")
    df.to_csv(output_path, index=False, encoding="utf-8-sig")

    print(f"Generated {len(df)} driver records")
    for p in names:
        print(f"  {p}: {profiles.count(p)} drivers")
    print(f"\nSaved to {output_path}")
    return df


if __name__ == "__main__":
    main()
