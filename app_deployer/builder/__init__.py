"""Container image build pipeline: build types, Dockerfiles and build strategies."""