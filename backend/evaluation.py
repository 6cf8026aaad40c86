import os
import sys
import difflib
from typing import Any, Tuple

import dotenv

# Load env vars
dotenv.load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from blextract.services.field_extractor import extract
from blextract.services.pipeline import run_extraction

# --- CONFIGURATION ---
ADDRESS_MATCH_THRESHOLD = 0.8  # 80% similarity required
FLOAT_TOLERANCE = 0.01         # For float comparisons

SAMPLE_TRANSCRIPT = os.path.join(os.path.dirname(__file__), 'tests', 'fixtures', 'sample_bl.txt')

MEDIA_TYPES = {
    '.pdf': 'application/pdf',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.webp': 'image/webp',
}

# --- GROUND TRUTH DATA ---
# Matches tests/fixtures/sample_bl.txt
GROUND_TRUTH = {
    "bl_number": "MEDU8811223",
    "vessel_name": "MSC AURORA",
    "voyage_number": "245N",
    "port_of_loading": "SHANGHAI, CHINA",
    "port_of_discharge": "CONAKRY",
    "client_name": "SOCIETE GUINEENNE DE COMMERCE",
    "client_address": "AVENUE DE LA REPUBLIQUE, KALOUM, CONAKRY",
    "supplier_name": "SHANGHAI RICE EXPORT CO LTD",
    "supplier_country": "CHINA",
    "hs_code": "1006.30.00",
    "packaging": "Sac",
    "package_count": 1140,
    "gross_weight": 57000.0,
    "net_weight": 56430.5,
    "cif_value": 25000.5,
    "cif_currency": "USD",
    "container_count": 2,
}

FUZZY_FIELDS = {"client_address"}
NUMERIC_FIELDS = {"gross_weight", "net_weight", "cif_value"}


def normalize_text(text: str) -> str:
    """Lowercase and remove extra whitespace."""
    if not text:
        return ""
    return " ".join(str(text).lower().split())


def is_match(field: str, extracted: Any, expected: Any) -> Tuple[bool, str]:
    """
    Returns (is_match, reason)
    """
    if field in FUZZY_FIELDS:
        ratio = difflib.SequenceMatcher(None, normalize_text(extracted), normalize_text(expected)).ratio()
        if ratio >= ADDRESS_MATCH_THRESHOLD:
            return True, f"Fuzzy Match ({ratio:.1%})"
        return False, f"Low Similarity ({ratio:.1%})"

    if field in NUMERIC_FIELDS:
        diff = abs(float(extracted) - float(expected))
        if diff <= FLOAT_TOLERANCE:
            return True, f"Float Match (Diff: {diff:.4f})"
        return False, f"Float Mismatch: {extracted} != {expected}"

    if normalize_text(extracted) == normalize_text(expected):
        return True, "Exact Match"
    return False, f"Mismatch: '{extracted}' != '{expected}'"


def load_extraction(path: str):
    if path.lower().endswith('.txt'):
        with open(path, 'r', encoding='utf-8') as f:
            return extract(f.read()), "transcript"

    media_type = MEDIA_TYPES.get(os.path.splitext(path)[1].lower(), 'application/octet-stream')
    with open(path, 'rb') as f:
        result = run_extraction(f.read(), media_type)
    return result.data, result.method


def run_evaluation(path: str = SAMPLE_TRANSCRIPT):
    print("--- Starting Evaluation ---")

    if not os.path.exists(path):
        print(f"Error: {path} not found.")
        return

    data, method = load_extraction(path)
    print(f"Acquisition: {method}")

    extracted_dict = data.model_dump()
    extracted_dict["container_count"] = len(data.containers)

    print("\n--- Comparison Results ---")
    tp = 0  # Matches
    fp = 0  # Extracted value wrong
    fn = 0  # Missed (empty when expected)

    print(f"{'Field':<20} | {'Extracted':<23} | {'Expected':<23} | {'Status'}")
    print("-" * 100)
    for field, expected_val in GROUND_TRUTH.items():
        extracted_val = extracted_dict.get(field)
        match, reason = is_match(field, extracted_val, expected_val)

        ext_disp = str(extracted_val)[:20] + "..." if len(str(extracted_val)) > 20 else str(extracted_val)
        exp_disp = str(expected_val)[:20] + "..." if len(str(expected_val)) > 20 else str(expected_val)
        status = "PASS" if match else "FAIL"
        print(f"{field:<20} | {ext_disp:<23} | {exp_disp:<23} | {status} ({reason})")

        if match:
            tp += 1
        elif extracted_val in ("", 0, 0.0):
            fn += 1
        else:
            fp += 1
    print("-" * 100)

    total_fields = len(GROUND_TRUTH)
    precision = tp / (tp + fp) if (tp + fp) > 0 else 0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0
    accuracy = tp / total_fields
    f1 = 2 * (precision * recall) / (precision + recall) if (precision + recall) > 0 else 0

    print("\n--- Final Metrics ---")
    print(f"Total Fields: {total_fields}")
    print(f"Correct (TP): {tp}")
    print(f"Wrong (FP):   {fp}")
    print(f"Missed (FN):  {fn}")
    print("-" * 20)
    print(f"Accuracy:  {accuracy:.2%}")
    print(f"Precision: {precision:.2%}")
    print(f"Recall:    {recall:.2%}")
    print(f"F1 Score:  {f1:.2%}")


if __name__ == "__main__":
    run_evaluation(sys.argv[1] if len(sys.argv) > 1 else SAMPLE_TRANSCRIPT)
