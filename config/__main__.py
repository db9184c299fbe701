"""Command line interface for checking configuration loading"""
from . import load_config
from pathlib import Path

def main():
    """Display loaded configuration and write example files"""
    config = load_config()

    print("\nSettings Configuration:")
    print("-" * 50)
    for key, value in config['settings'].items():
        print(f"{key}: {value}")

    print("\nQtep Configuration:")
    print("-" * 50)
    for key, value in config['node'].items():
        if key == 'rpcpassword':
            value = '********'
        print(f"{key}: {value}")

    # Save example configuration files
    examples_dir = Path("examples")
    examples_dir.mkdir(exist_ok=True)

    with open(examples_dir / "settings.conf.example", "w") as f:
        f.write("""[DEFAULT]
# Path to Qtep configuration directory
qtep_root = /home/user/.qtep/
api_host = 0.0.0.0
api_port = 3001
rpc_timeout = 10
request_timeout = 30
log_level = INFO
""")

    with open(examples_dir / "qtep.conf.example", "w") as f:
        f.write("""# Qtep configuration file
server=1
txindex=1
addressindex=1
spentindex=1
rpcbind=127.0.0.1
rpcport=3889
rpcallowip=127.0.0.1
rpcuser=user
rpcpassword=password
rpcworkqueue=1100
""")

if __name__ == "__main__":
    main()
