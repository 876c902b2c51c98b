#!/usr/bin/env python3
"""
Create test data for the student batch allocation system.
"""
import random
import sys
from typing import Optional

import pandas as pd
from faker import Faker

from csv_handler import StudentCsvHandler
from models import Student

SAP_PREFIX = 5900


def create_test_data(output_file: str = 'students.csv', count: int = 120,
                     seed: Optional[int] = None) -> pd.DataFrame:
    """Create a roster of realistic students and save it in the roster CSV format."""
    fake = Faker('en_IN')  # Indian locale for better names
    rng = random.Random(seed)
    if seed is not None:
        fake.seed_instance(seed)

    # Unique SAP IDs in the 5900xxxxx range
    numbers = rng.sample(range(10000, 100000), count)

    students = []
    for number in numbers:
        students.append(Student(
            key=f"{SAP_PREFIX}{number}",
            name=fake.name(),
            # Marks loosely bell-shaped around 65
            score=max(0, min(100, int(rng.gauss(65, 15))))
        ))

    StudentCsvHandler().save(output_file, students)
    return pd.DataFrame([s.to_dict() for s in students])


def create_sample_batches(total_students: int, batch_count: int = 4):
    """Batch layouts with a little spare room over the roster size."""
    capacity = -(-total_students // batch_count) + 2
    return [{'name': f"B{i + 1}", 'capacity': capacity} for i in range(batch_count)]


if __name__ == "__main__":
    output = sys.argv[1] if len(sys.argv) > 1 else 'students.csv'
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 120

    df = create_test_data(output, count)

    bands = pd.cut(df['score'], bins=[-1, 39, 59, 79, 100],
                   labels=['0-39', '40-59', '60-79', '80-100'])

    print(f"Test data created: '{output}'")
    print(f"Total students: {len(df)}")
    print(f"Average marks: {df['score'].mean():.1f}")
    print("Marks distribution:")
    for band, band_count in bands.value_counts().sort_index().items():
        print(f"   {band}: {band_count} students")

    print("\nSample batch configuration:")
    for batch in create_sample_batches(len(df)):
        print(f"   --batch {batch['name']}:{batch['capacity']}")
