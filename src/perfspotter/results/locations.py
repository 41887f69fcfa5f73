"""
Names of the files and directories a diagnosis run writes below its run directory.
"""

REPORT_FILE_NAME = "SpotterReport.txt"
RESULTS_FILE_NAME = "results.json"
# <run_dir>/<controller>/data/<experiment>/<record_type>.<ext>
DATA_SUB_DIR = "data"
# <run_dir>/<controller>/result-details/<resource>
RESULT_RESOURCES_SUB_DIR = "result-details"
