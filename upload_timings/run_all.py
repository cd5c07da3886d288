import subprocess
import sys

def main():
    """
    Main entry point for running the full test suite.
    Executes pytest on the 'upload_timings/' directory.
    Passes any command-line arguments to pytest.
    """
    print("Running upload timing tests with pytest...")

    cmd = [sys.executable, "-m", "pytest", "upload_timings/"]

    # Default to auto parallelism unless -n/--numprocesses is given
    if not any(arg.startswith("-n") or arg.startswith("--numprocesses") for arg in sys.argv[1:]):
        cmd.extend(["-n", "auto"])

    # Everything after the script name is passed through (e.g. --headed)
    cmd.extend(sys.argv[1:])

    print(f"Executing: {' '.join(cmd)}")
    result = subprocess.run(cmd)
    sys.exit(result.returncode)

if __name__ == "__main__":
    main()
