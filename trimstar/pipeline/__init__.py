"""High level code for driving a trim and align RNA-seq pipeline.

This structures processing steps into the following modules:

  - samples.py: Discover samples and raw read encoding in an input directory.
  - genome.py: Prepare the output tree and working genome directory.
  - main.py: Drive index building, per-sample dispatch and completion tracking.
  - summary.py: Final run status and per-sample manifest.
"""
