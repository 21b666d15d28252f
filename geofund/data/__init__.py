from .sample_data import DATASETS, fetch_reference_dataset
